import math

import pandas as pd
from stairval.notepad import create_notepad
from purkplus.mapper import DefaultIntakeMapper
from purkplus.units import CreatinineReading, Unit


def _row(**fields) -> pd.Series:
    base = {
        "patient_ID": "P1",
        "creatinine_72h": math.nan,
        "creatinine_72h_unit": math.nan,
        "failure_to_thrive": "no",
        "high_grade_vur": "no",
        "renal_dysplasia": "no",
    }
    base.update(fields)
    return pd.Series(base)


def test_blank_creatinine_is_unknown():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(_row(), "presentation", notepad)
    assert obs.creatinine_72h is None
    assert not notepad.has_errors()


def test_reading_and_flags():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(
        _row(creatinine_72h=160, creatinine_72h_unit="µmol/L", failure_to_thrive="Y", renal_dysplasia=1),
        "presentation",
        notepad,
    )
    assert obs.creatinine_72h == CreatinineReading(160.0, Unit.UMOL_L)
    assert obs.failure_to_thrive and obs.renal_dysplasia
    assert not obs.high_grade_vur
    assert not notepad.has_errors()


def test_vur_grade_sets_flag():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(_row(vur_grade="IV"), "presentation", notepad)
    assert obs.high_grade_vur


def test_low_vur_grade_keeps_flag_off():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(_row(vur_grade=2), "presentation", notepad)
    assert not obs.high_grade_vur
    assert not notepad.has_warnings()


def test_unrecognized_vur_grade_warns():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(_row(vur_grade="severe"), "presentation", notepad)
    assert not obs.high_grade_vur
    assert notepad.has_warnings()


def test_bad_cells_are_errors():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(
        _row(creatinine_72h="high", failure_to_thrive="maybe"), "presentation", notepad
    )
    assert obs.creatinine_72h is None
    assert not obs.failure_to_thrive
    messages = [str(e) for e in notepad.errors()]
    assert any("creatinine" in m for m in messages)
    assert any("failure_to_thrive" in m for m in messages)


def test_unknown_unit_is_error():
    notepad = create_notepad("row")
    DefaultIntakeMapper.parse_presentation_row(
        _row(creatinine_72h=1.0, creatinine_72h_unit="mmol/L"), "presentation", notepad
    )
    assert notepad.has_errors()


def test_negative_creatinine_is_error():
    notepad = create_notepad("row")
    obs = DefaultIntakeMapper.parse_presentation_row(_row(creatinine_72h=-1), "presentation", notepad)
    assert obs.creatinine_72h is None
    assert notepad.has_errors()
