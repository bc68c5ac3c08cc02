import json
import math

from purkplus.assessment import INCOMPLETE_MESSAGE, assess
from purkplus.purk import PresentationObservations
from purkplus.risk import RiskGroup
from purkplus.units import CreatinineReading, Unit


def test_high_purk_intermediate_scn1():
    """160 µmol/L + FTT → score 4 (High); SCN1 0.5 mg/dL (Intermediate) → PURK+ High."""
    observations = PresentationObservations(
        creatinine_72h=CreatinineReading(160, Unit.UMOL_L),
        failure_to_thrive=True,
        high_grade_vur=False,
        renal_dysplasia=False,
    )
    a = assess(observations, CreatinineReading(0.5, Unit.MG_DL))
    assert a.purk_score == 4
    assert a.purk_group is RiskGroup.HIGH
    assert a.scn1_group is RiskGroup.INTERMEDIATE
    assert a.purk_plus_group is RiskGroup.HIGH
    assert a.is_complete


def test_nothing_known_is_incomplete():
    a = assess(PresentationObservations(), None)
    assert a.purk_score == 0
    assert a.purk_group is RiskGroup.LOW
    assert a.scn1_group is None
    assert a.purk_plus_group is None
    assert not a.is_complete
    assert a.scn1_normalized is None
    assert INCOMPLETE_MESSAGE in a.summary_lines()


def test_negative_scn1_is_undefined():
    a = assess(PresentationObservations(renal_dysplasia=True), CreatinineReading(-0.1))
    assert a.scn1_group is None
    assert a.purk_plus_group is None


def test_repeated_evaluation_is_identical():
    observations = PresentationObservations(high_grade_vur=True, renal_dysplasia=True)
    follow_up = CreatinineReading(30, Unit.UMOL_L)
    assert assess(observations, follow_up) == assess(observations, follow_up)


def test_to_dict_is_json_ready():
    a = assess(
        PresentationObservations(creatinine_72h=CreatinineReading(math.nan)),
        CreatinineReading(1.2),
    )
    payload = json.loads(json.dumps(a.to_dict()))
    assert payload["purk"]["creatinine_72h"]["mgdl"] is None
    assert payload["purk"]["group"] == "Low"
    assert payload["scn1"]["reading"]["umol"] == 1.2 * 88.4
    assert payload["scn1"]["group"] == "High"
    assert payload["purk_plus"]["group"] == "High"


def test_to_dict_undefined_groups_are_null():
    payload = assess(PresentationObservations(), None).to_dict()
    assert payload["scn1"] == {"reading": None, "group": None}
    assert payload["purk_plus"]["group"] is None


def test_summary_lines_complete():
    lines = assess(PresentationObservations(), CreatinineReading(0.2)).summary_lines()
    assert "PURK+ group:     Low" in lines
    assert INCOMPLETE_MESSAGE not in lines
