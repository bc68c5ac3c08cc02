"""
PURK+ combination.

The SCN1-weighted matrix that combines the initial PURK group with the one-year
SCN1 group. The table is literal; it is not max/min of the two inputs
(PURK High with SCN1 Low gives Intermediate).
"""

import typing

from .risk import RiskGroup

_L, _I, _H = RiskGroup.LOW, RiskGroup.INTERMEDIATE, RiskGroup.HIGH

# PURK_PLUS_MATRIX[scn1_group][purk_group]
PURK_PLUS_MATRIX: dict[RiskGroup, dict[RiskGroup, RiskGroup]] = {
    _L: {_L: _L, _I: _L, _H: _I},
    _I: {_L: _I, _I: _I, _H: _H},
    _H: {_L: _H, _I: _H, _H: _H},
}


def purk_plus_risk(
    purk: RiskGroup, scn1: typing.Optional[RiskGroup]
) -> typing.Optional[RiskGroup]:
    # combined risk only exists once the follow-up group does
    if scn1 is None:
        return None
    return PURK_PLUS_MATRIX[scn1][purk]


def matrix_rows() -> list[tuple[RiskGroup, list[RiskGroup]]]:
    """
    One (scn1_group, [combined for PURK Low, Intermediate, High]) row per SCN1
    group, in ascending order.
    """
    return [
        (scn1, [PURK_PLUS_MATRIX[scn1][purk] for purk in RiskGroup])
        for scn1 in RiskGroup
    ]
