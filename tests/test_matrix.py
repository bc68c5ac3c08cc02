import itertools

import pytest
from purkplus.matrix import PURK_PLUS_MATRIX, matrix_rows, purk_plus_risk
from purkplus.risk import RiskGroup

L, I, H = RiskGroup.LOW, RiskGroup.INTERMEDIATE, RiskGroup.HIGH


@pytest.mark.parametrize(
    "purk, scn1, expected",
    [
        (L, L, L), (I, L, L), (H, L, I),
        (L, I, I), (I, I, I), (H, I, H),
        (L, H, H), (I, H, H), (H, H, H),
    ],
)
def test_purk_plus_table(purk, scn1, expected):
    assert purk_plus_risk(purk, scn1) is expected


def test_follow_up_weighs_more_than_presentation():
    assert purk_plus_risk(H, L) is I
    assert purk_plus_risk(L, H) is H


@pytest.mark.parametrize("purk", list(RiskGroup))
def test_undefined_follow_up_gives_undefined(purk):
    assert purk_plus_risk(purk, None) is None


def test_combined_never_below_follow_up():
    for purk, scn1 in itertools.product(RiskGroup, RiskGroup):
        assert PURK_PLUS_MATRIX[scn1][purk] >= scn1


def test_matrix_rows_order():
    rows = matrix_rows()
    assert [scn1 for scn1, _ in rows] == [L, I, H]
    assert rows[0][1] == [L, L, I]
    assert rows[1][1] == [I, I, H]
    assert rows[2][1] == [H, H, H]
