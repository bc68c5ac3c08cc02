import abc
import logging
import math
import numbers
import re
import typing

from dataclasses import dataclass, replace

import hpotk
import pandas as pd
from stairval.notepad import Notepad

from .phenotype import Phenotype
from .purk import PresentationObservations, is_high_grade_vur, parse_vur_grade
from .scn1 import SCN1_WINDOW_DAYS, nadir
from .units import CreatinineReading, Unit

logger = logging.getLogger(__name__)

# Minimal required columns (after renaming) for each sheet type
PRESENTATION_KEY_COLUMNS = {"failure_to_thrive", "renal_dysplasia"}
# either the boolean flag or the reflux grade must be given
VUR_COLUMNS = {"high_grade_vur", "vur_grade"}
FOLLOW_UP_KEY_COLUMNS = {"creatinine"}
PHENOTYPE_KEY_COLUMNS = {"hpo_id", "status"}

# Friendly aliases → reduces friction while keeping behavior explicit
KNOWN_SHEET_ALIASES: dict[str, set[str]] = {"presentation": {"presentation", "purk", "initial"},
                                            "follow_up": {"follow_up", "follow-up", "followup", "scn1", "labs"},
                                            "phenotype": {"phenotype", "hpo", "pheno"}}

# HPO terms that set a PURK flag when observed (descendants count too, given an ontology)
FAILURE_TO_THRIVE_TERM = "HP:0001508"
RENAL_DYSPLASIA_TERM = "HP:0000110"
# reflux alone says nothing about the grade, so it never sets the flag
VESICOURETERAL_REFLUX_TERM = "HP:0000076"

FLAG_TERMS = {
    "failure_to_thrive": FAILURE_TO_THRIVE_TERM,
    "renal_dysplasia": RENAL_DYSPLASIA_TERM,
}


@dataclass
class TypedTables:
    """
    Explicit, typed access to workbook sheets.
    Any field can be `None`, meaning that the sheet was not provided.
    """
    presentation: pd.DataFrame | None
    follow_up: pd.DataFrame | None
    phenotype: pd.DataFrame | None


@dataclass(frozen=True)
class Intake:
    """
    Everything read from one patient's workbook.

    Attributes:
        patient_ID: Identifier from the presentation sheet index.
        observations: PURK inputs, with flags merged from the phenotype sheet.
        follow_up: SCN1 (nadir within the window), or None if not available.
    """

    patient_ID: str
    observations: PresentationObservations
    follow_up: CreatinineReading | None


class IntakeMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> Intake | None:
        # return None only when the workbook cannot describe a patient at all
        raise NotImplementedError


class DefaultIntakeMapper(IntakeMapper):
    def __init__(self, hpo: hpotk.MinimalOntology | None = None, scn1_window_days: float = SCN1_WINDOW_DAYS):
        """
        - hpo: optional ontology; enables ID checks and descendant matching for phenotype flags
        - scn1_window_days: follow-up readings older than this are ignored for the nadir
        """
        self._hpo = hpo
        self.scn1_window_days = scn1_window_days
        self._flag_term_ids = {flag: hpotk.TermId.from_curie(curie) for flag, curie in FLAG_TERMS.items()}
        self._vur_term_id = hpotk.TermId.from_curie(VESICOURETERAL_REFLUX_TERM)

    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> Intake | None:
        """
        Process:
        1) choose/validate input tables
        2) map the single presentation row to PresentationObservations
        3) merge observed HPO phenotypes into the flags
        4) pick the SCN1 nadir from the follow-up readings
        """
        typed_tables = self._choose_named_tables(tables, notepad)
        if typed_tables.presentation is None:
            return None

        patient_id, observations = self._map_presentation_table(typed_tables.presentation, notepad)
        if patient_id is None:
            return None

        phenotypes = self._map_phenotype_table(typed_tables.phenotype, patient_id, notepad)
        observations = self._apply_phenotypes(observations, phenotypes, notepad)

        readings = self._map_follow_up_table(typed_tables.follow_up, patient_id, notepad)
        follow_up = nadir(readings, max_age_days=self.scn1_window_days)
        if readings and follow_up is None:
            notepad.add_warning(
                f"Sheet 'follow_up': no creatinine reading within the first {self.scn1_window_days:g} days"
            )
        logger.info(f"Mapped patient {patient_id!r}: {observations}, SCN1={follow_up}")

        return Intake(patient_ID=patient_id, observations=observations, follow_up=follow_up)

    def _choose_named_tables(self, tables: dict[str, pd.DataFrame], notepad: Notepad) -> TypedTables:
        """
        Prefer explicit sheet names (plus common aliases).
        """

        def by_alias(kind: str) -> pd.DataFrame | None:
            aliases = KNOWN_SHEET_ALIASES[kind]
            for sheet_name, df in tables.items():
                if sheet_name.strip().casefold() in aliases:
                    return df
            return None

        selected = TypedTables(
            presentation=by_alias("presentation"),
            follow_up=by_alias("follow_up"),
            phenotype=by_alias("phenotype"),
        )

        # Hard-minimum: the presentation sheet must exist
        if selected.presentation is None:
            notepad.add_error("Missing required sheet: 'presentation'.")

        return selected

    @staticmethod
    def _prepare_sheet(df: pd.DataFrame) -> pd.DataFrame:
        """Bring the index into a column named 'patient_ID'."""
        working = df.reset_index()
        original = working.columns[0]
        working = working.rename(columns={original: "patient_ID"})
        # drop rows that are entirely blank (trailing Excel rows)
        return working.dropna(how="all")

    @staticmethod
    def _normalize_patient_id(value: typing.Any) -> str | None:
        """
        Patient IDs as text; blank/NaN → None.
        Numeric IDs upcast by pandas (101 → 101.0) are read back as integers.
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        if isinstance(value, numbers.Real) and not isinstance(value, bool) and float(value).is_integer():
            return str(int(value))
        s = str(value).strip()
        return s or None

    @staticmethod
    def _to_bool(value: typing.Any) -> bool:
        """
        Robust boolean parsing:
        - True for: 1, '1', 'true', 't', 'yes', 'y', 'x' (case-insensitive)
        - False for: 0, '0', 'false', 'f', 'no', 'n', '', None, NaN
        - anything else raises ValueError
        """
        if isinstance(value, bool):
            return value
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return False
        if isinstance(value, numbers.Number):
            return bool(value != 0)
        s = str(value).strip().lower()
        if s in {"1", "true", "t", "yes", "y", "x"}:
            return True
        if s in {"0", "false", "f", "no", "n", ""}:
            return False
        raise ValueError(f"Cannot interpret {value!r} as yes/no")

    @staticmethod
    def _to_float(value: typing.Any) -> float | None:
        """
        Numeric cell parsing:
        - blank / None / NaN → None (unknown)
        - numbers and numeric strings (decimal comma allowed) → float
        - anything else raises ValueError
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            s = value.strip().replace(",", ".")
            if not s:
                return None
            try:
                number = float(s)
            except ValueError:
                raise ValueError(f"Cannot interpret {value!r} as a number")
        else:
            if pd.isna(value):
                return None
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Cannot interpret {value!r} as a number")
        if not math.isfinite(number):
            raise ValueError(f"Cannot interpret {value!r} as a finite number")
        return number

    @staticmethod
    def _to_unit(value: typing.Any) -> Unit:
        # blank unit cells default to mg/dL
        if value is None or (not isinstance(value, str) and pd.isna(value)) or not str(value).strip():
            return Unit.MG_DL
        return Unit.from_label(str(value))

    @staticmethod
    def parse_reading(value: typing.Any, unit: typing.Any, what: str, sheet_name: str,
                      notepad: Notepad) -> CreatinineReading | None:
        """
        Parse a creatinine value + unit pair. Returns None for a blank value or when
        validation fails (the problem is recorded in the notepad).
        """
        try:
            number = DefaultIntakeMapper._to_float(value)
            parsed_unit = DefaultIntakeMapper._to_unit(unit)
        except ValueError as e:
            notepad.add_error(f"Sheet {sheet_name!r}: {what}: {e}")
            return None
        if number is None:
            return None
        if number < 0:
            notepad.add_error(f"Sheet {sheet_name!r}: {what}: negative creatinine {number:g} is not a valid value")
            return None
        return CreatinineReading(value=number, unit=parsed_unit)

    @staticmethod
    def parse_presentation_row(row: pd.Series, sheet_name: str, notepad: Notepad) -> PresentationObservations:
        """
        Parse the presentation row into PresentationObservations.
        Invalid cells are recorded as errors and read as "unknown"/False.
        """
        creatinine = DefaultIntakeMapper.parse_reading(
            row.get("creatinine_72h"), row.get("creatinine_72h_unit"),
            "creatinine >72h", sheet_name, notepad,
        )

        flags: dict[str, bool] = {}
        for column in ("failure_to_thrive", "high_grade_vur", "renal_dysplasia"):
            try:
                flags[column] = DefaultIntakeMapper._to_bool(row.get(column))
            except ValueError as e:
                notepad.add_error(f"Sheet {sheet_name!r}: {column}: {e}")
                flags[column] = False

        grade = row.get("vur_grade")
        if grade is not None and not pd.isna(grade) and str(grade).strip():
            if parse_vur_grade(grade) is None:
                notepad.add_warning(f"Sheet {sheet_name!r}: unrecognized VUR grade {grade!r}; not counted as high grade")
            elif is_high_grade_vur(grade):
                flags["high_grade_vur"] = True

        return PresentationObservations(creatinine_72h=creatinine, **flags)

    def _map_presentation_table(self, df: pd.DataFrame, notepad: Notepad) -> tuple[str | None, PresentationObservations]:
        """
        Sheet-level wrapper for the presentation row:
          - normalize index to 'patient_ID'
          - require the flag columns and exactly one patient row
          - delegate row conversion to parse_presentation_row
        """
        working = self._prepare_sheet(df)
        have = set(working.columns)
        missing = sorted(PRESENTATION_KEY_COLUMNS - have)
        if not VUR_COLUMNS & have:
            missing.append("high_grade_vur or vur_grade")
        if missing:
            notepad.add_error(f"Sheet 'presentation': missing required columns: {missing}")
            return None, PresentationObservations()

        if len(working) != 1:
            notepad.add_error(
                f"Sheet 'presentation': expected exactly one patient row, found {len(working)}"
            )
            return None, PresentationObservations()

        row = working.iloc[0]
        patient_id = self._normalize_patient_id(row["patient_ID"])
        if patient_id is None:
            notepad.add_error("Sheet 'presentation': the patient row has no patient ID")
            return None, PresentationObservations()
        return patient_id, self.parse_presentation_row(row, "presentation", notepad)

    @staticmethod
    def _check_patient(row: pd.Series, patient_id: str, sheet_name: str, notepad: Notepad) -> bool:
        # rows without an ID belong to the workbook's patient
        row_id = DefaultIntakeMapper._normalize_patient_id(row.get("patient_ID"))
        if row_id is None:
            return True
        if row_id != patient_id:
            notepad.add_error(
                f"Sheet {sheet_name!r}: row for patient {row_id!r} does not match "
                f"presentation patient {patient_id!r}; one patient per workbook"
            )
            return False
        return True

    def _map_follow_up_table(self, df: pd.DataFrame | None, patient_id: str,
                             notepad: Notepad) -> list[tuple[float, CreatinineReading]]:
        """
        Sheet-level wrapper for follow-up creatinine rows → (age_days, reading) pairs.
        A missing age is read as inside the window.
        """
        if df is None:
            return []
        working = self._prepare_sheet(df)
        missing = FOLLOW_UP_KEY_COLUMNS - set(working.columns)
        if missing:
            notepad.add_error(f"Sheet 'follow_up': missing expected columns: {sorted(missing)}")
            return []

        readings: list[tuple[float, CreatinineReading]] = []
        for index, row in working.iterrows():
            if not self._check_patient(row, patient_id, "follow_up", notepad):
                continue
            reading = self.parse_reading(row.get("creatinine"), row.get("unit"),
                                         f"row {index + 2}", "follow_up", notepad)
            if reading is None:
                continue
            try:
                age_days = self._to_float(row.get("age_days"))
            except ValueError as e:
                notepad.add_error(f"Sheet 'follow_up': row {index + 2}: age_days: {e}")
                continue
            if age_days is None:
                age_days = 0.0
            elif age_days > self.scn1_window_days:
                notepad.add_warning(
                    f"Sheet 'follow_up': row {index + 2}: reading at day {age_days:g} is outside "
                    f"the first {self.scn1_window_days:g} days and is ignored"
                )
            readings.append((age_days, reading))
        return readings

    @staticmethod
    def parse_phenotype_row(row: pd.Series, sheet_name: str, notepad: Notepad) -> Phenotype | None:
        """
        Parse a single phenotype row ("Failure to thrive (HP:0001508)", "0001508", ...).
        Returns None if validation fails for this row.
        """
        hpo_cell = str(row.get("hpo_id", "")).strip()

        # Parse optional label and digits; extract the last token (it should just be the HPO code), case-insensitive
        m = re.match(
            r"""
            ^\s*
            (?P<label>.*?)              # optional label
            \s*                         # whitespace
            \(?                         # optional "("
            (?:HP:?)?(?P<digits>\d+)    # digits, with optional "HP"
            \)?                         # optional ")"
            \s*$
            """,
            hpo_cell,
            re.VERBOSE | re.IGNORECASE,
        )
        if not m:
            notepad.add_error(f"Sheet {sheet_name!r}: Cannot parse HPO term+ID from {hpo_cell!r}")
            return None

        curie = f"HP:{m.group('digits').zfill(7)}"
        try:
            return Phenotype(
                patient_ID=str(row["patient_ID"]).strip(),
                HPO_ID=curie,
                status=DefaultIntakeMapper._to_bool(row.get("status")),
                label=m.group("label").strip(),
            )
        except (ValueError, TypeError) as e:
            notepad.add_error(f"Sheet {sheet_name!r}: {e}")
            return None

    def _map_phenotype_table(self, df: pd.DataFrame | None, patient_id: str, notepad: Notepad) -> list[Phenotype]:
        if df is None:
            return []
        working = self._prepare_sheet(df)
        missing = PHENOTYPE_KEY_COLUMNS - set(working.columns)
        if missing:
            notepad.add_error(f"Sheet 'phenotype': missing expected columns: {sorted(missing)}")
            return []

        records: list[Phenotype] = []
        for _, row in working.iterrows():
            if not self._check_patient(row, patient_id, "phenotype", notepad):
                continue
            # rows without an ID inherit the workbook's patient
            row = row.copy()
            row["patient_ID"] = patient_id
            phenotype = self.parse_phenotype_row(row, "phenotype", notepad)
            if phenotype is None:
                continue
            term_id = hpotk.TermId.from_curie(phenotype.HPO_ID)
            if self._hpo is not None and self._hpo.get_term(term_id) is None:
                notepad.add_warning(f"Sheet 'phenotype': HPO ID {phenotype.HPO_ID!r} not found in ontology; ignored")
                continue
            records.append(phenotype)
        return records

    def _matches(self, term_id: hpotk.TermId, target: hpotk.TermId) -> bool:
        # exact match, or a descendant when an ontology is available
        if term_id == target:
            return True
        if self._hpo is None:
            return False
        return target in set(self._hpo.graph.get_ancestors(term_id))

    def _apply_phenotypes(self, observations: PresentationObservations, phenotypes: list[Phenotype],
                          notepad: Notepad) -> PresentationObservations:
        """
        Observed HPO terms switch on the matching PURK flag; an excluded term that
        contradicts a flag already set on the presentation sheet is only reported.
        """
        updates: dict[str, bool] = {}
        for phenotype in phenotypes:
            term_id = hpotk.TermId.from_curie(phenotype.HPO_ID)
            if phenotype.status and self._matches(term_id, self._vur_term_id):
                notepad.add_warning(
                    f"Sheet 'phenotype': {phenotype.HPO_ID!r} (vesicoureteral reflux) does not give a grade; "
                    f"set 'high_grade_vur' or 'vur_grade' on the presentation sheet"
                )
                continue
            for flag, target in self._flag_term_ids.items():
                if not self._matches(term_id, target):
                    continue
                if phenotype.status:
                    updates[flag] = True
                elif getattr(observations, flag):
                    notepad.add_warning(
                        f"Sheet 'phenotype': {phenotype.HPO_ID!r} is excluded but "
                        f"{flag!r} is set on the presentation sheet"
                    )
        return replace(observations, **updates) if updates else observations
