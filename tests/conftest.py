import typing

import hpotk
import pandas as pd
import pytest


def _write_workbook(path, sheets: dict[str, pd.DataFrame]) -> str:
    # first column of every sheet = patient ID (the DataFrame index)
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        for name, df in sheets.items():
            df.to_excel(w, sheet_name=name)
    return str(path)


@pytest.fixture(scope="session")
def write_workbook():
    return _write_workbook


@pytest.fixture
def presentation_df() -> pd.DataFrame:
    return pd.DataFrame({
        "Creatinine >72h (µmol/L)": [160],
        "cr72h_unit": ["µmol/L"],
        "FTT": ["yes"],
        "VUR": ["no"],
        "Renal dysplasia": [0],
    }, index=pd.Index(["PAT1"], name="patient_ID"))


@pytest.fixture
def follow_up_df() -> pd.DataFrame:
    return pd.DataFrame({
        "SCN1": [0.8, 0.5, 61.88, 0.3],
        "unit": ["mg/dL", "mg/dL", "µmol/L", "mg/dL"],
        "age_days": [30, 200, 300, 400],
    }, index=pd.Index(["PAT1"] * 4, name="patient_ID"))


@pytest.fixture
def intake_workbook(tmp_path, presentation_df, follow_up_df) -> str:
    """
    PAT1: creatinine 160 µmol/L + FTT → PURK 4 (High);
    nadir within a year is 0.5 mg/dL (day 200; day 400 is outside the window) → SCN1 Intermediate → PURK+ High.
    """
    return _write_workbook(tmp_path / "intake.xlsx", {
        "presentation": presentation_df,
        "follow_up": follow_up_df,
    })


class FakeGraph:
    def __init__(self, parents: dict[str, list[str]]):
        self._parents = parents

    def get_ancestors(self, term_id) -> typing.Iterator[hpotk.TermId]:
        seen: set[str] = set()
        stack = list(self._parents.get(term_id.value, []))
        while stack:
            curie = stack.pop()
            if curie in seen:
                continue
            seen.add(curie)
            yield hpotk.TermId.from_curie(curie)
            stack.extend(self._parents.get(curie, []))


class FakeOntology:
    """
    Stand-in for hpotk.MinimalOntology exposing the two calls the mapper uses.
    """

    def __init__(self, parents: dict[str, list[str]]):
        self.graph = FakeGraph(parents)
        self._known = set(parents) | {p for ps in parents.values() for p in ps}

    def get_term(self, term_id):
        return object() if term_id.value in self._known else None


@pytest.fixture(scope="session")
def small_hpo() -> FakeOntology:
    return FakeOntology({
        # Failure to thrive in infancy → Failure to thrive
        "HP:0001531": ["HP:0001508"],
        "HP:0001508": ["HP:0001507"],
        # Multicystic kidney dysplasia → Renal dysplasia
        "HP:0000003": ["HP:0000110"],
        "HP:0000110": ["HP:0000077"],
        "HP:0000076": ["HP:0000079"],
    })
