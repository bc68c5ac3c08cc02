import pathlib

import pandas as pd

# Columns that need renaming → target field names
RENAME_MAP = {
    # presentation columns
    "cr72h": "creatinine_72h",
    "cr_72h": "creatinine_72h",
    "creatinine_>72h": "creatinine_72h",
    "cr72h_unit": "creatinine_72h_unit",
    "ftt": "failure_to_thrive",
    "vur": "high_grade_vur",
    "high-grade_vur": "high_grade_vur",
    "dysplasia": "renal_dysplasia",
    # follow-up columns
    "scn1": "creatinine",
    "cr": "creatinine",
    "scn1_unit": "unit",
    "age": "age_days",
    # phenotype columns
    "hpo": "hpo_id",
}

# A CSV file holds a single table; it is read as the presentation sheet
CSV_SHEET_NAME = "presentation"


def _normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    # CLEAN & NORMALIZE headers:
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)", e.g. "(mg/dL)"
        .str.replace(r"\s+", "_", regex=True)  # spaces → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )

    # apply specific renames (e.g. "ftt" → "failure_to_thrive")
    return df.rename(
        columns={
            orig: target
            for orig, target in RENAME_MAP.items()
            if orig in df.columns
        }
    )


def load_sheets_as_tables(workbook_path: str) -> dict[str, pd.DataFrame]:
    """
    Read each worksheet into a DataFrame:
      - first row = header
      - first column = index (patient ID)
      - normalize all headers to snake_case lowercase
      - apply renames from RENAME_MAP
    A .csv file yields a single table named "presentation".
    """
    path = pathlib.Path(workbook_path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, header=0, index_col=0)
        return {CSV_SHEET_NAME: _normalize_headers(df)}

    excel = pd.ExcelFile(path, engine="openpyxl")
    tables: dict[str, pd.DataFrame] = {}

    for sheet_name in excel.sheet_names:
        df = pd.read_excel(
            excel, sheet_name=sheet_name, header=0, index_col=0, engine="openpyxl"
        )
        tables[sheet_name] = _normalize_headers(df)

    return tables
