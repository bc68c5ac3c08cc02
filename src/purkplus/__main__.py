"""
Command‑line interface for the PURK+ calculator.
Scores PURK at initial presentation, groups SCN1 at ~1 year and combines both
into the PURK+ risk group, either from options or from a one-patient workbook.
"""

import click
import hpotk
import json
import logging
import pathlib
import sys
import typing

from stairval.notepad import create_notepad

from .assessment import Assessment, assess
from .loader import load_sheets_as_tables
from .mapper import DefaultIntakeMapper
from .matrix import matrix_rows
from .purk import PresentationObservations, is_high_grade_vur
from .risk import RiskGroup
from .scn1 import SCN1_BAND_TEXT
from .units import CreatinineReading, Unit

logger = logging.getLogger(__name__)

UNIT_CHOICE = click.Choice([unit.label for unit in Unit] + ["umol/L"], case_sensitive=False)


@click.group()
@click.option("--verbose", is_flag=True, help="Also emit debug logs to stderr")
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose: bool = False, log_file_path: typing.Optional[str] = None):
    """PURK+: pediatric kidney risk from PURK at presentation and SCN1 at one year."""
    _configure_logging(verbose, log_file_path)


@main.command(name="calculate")
@click.option("--cr72h", type=float, default=None, help="serum creatinine >72h after birth (omit if unknown)")
@click.option("--cr72h-unit", type=UNIT_CHOICE, default=Unit.MG_DL.label, show_default=True)
@click.option("--ftt/--no-ftt", default=False, help="failure to thrive")
@click.option("--vur/--no-vur", default=False, help="high-grade (III–V) VUR on VCUG")
@click.option("--vur-grade", type=str, default=None, help="VUR grade (1–5 or I–V); III–V counts as high grade")
@click.option("--dysplasia/--no-dysplasia", default=False, help="renal dysplasia on ultrasound")
@click.option("--scn1", type=float, default=None, help="serum creatinine nadir in the first year")
@click.option("--scn1-unit", type=UNIT_CHOICE, default=Unit.MG_DL.label, show_default=True)
@click.option("-r", "--raw", is_flag=True, help="print JSON instead of text")
def calculate(
    cr72h: typing.Optional[float],
    cr72h_unit: str,
    ftt: bool,
    vur: bool,
    vur_grade: typing.Optional[str],
    dysplasia: bool,
    scn1: typing.Optional[float],
    scn1_unit: str,
    raw: bool,
):
    """
    Compute PURK, SCN1 and PURK+ groups from command-line values.
    """
    observations = PresentationObservations(
        creatinine_72h=None if cr72h is None else CreatinineReading(cr72h, Unit.from_label(cr72h_unit)),
        failure_to_thrive=ftt,
        high_grade_vur=vur or is_high_grade_vur(vur_grade),
        renal_dysplasia=dysplasia,
    )
    follow_up = None if scn1 is None else CreatinineReading(scn1, Unit.from_label(scn1_unit))
    _print_assessment(assess(observations, follow_up), raw)


@main.command(name="evaluate-excel")
@click.option(
    "-e",
    "--excel-path",
    "excel_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to the one-patient intake workbook (.xlsx or .csv)",
)
@click.option(
    "-hpo",
    "--custom-hpo",
    "hpo_path",
    type=click.Path(exists=True, dir_okay=False),
    help="path to an HPO JSON file; enables descendant matching on the phenotype sheet",
)
@click.option("-r", "--raw", is_flag=True, help="print JSON instead of text")
def evaluate_excel(excel_file: str, hpo_path: typing.Optional[str] = None, raw: bool = False):
    """
    Read the presentation, follow-up and phenotype sheets of one patient,
    report any problems and print the assessment.
    """
    # 1) Optional ontology
    ontology = _load_ontology(hpo_path) if hpo_path else None
    mapper = DefaultIntakeMapper(ontology)

    # 2) Read all sheets into DataFrames
    try:
        tables = load_sheets_as_tables(excel_file)
    except Exception as e:
        logger.error(f"Failed to read '{excel_file}': {e}")
        click.echo(f"Error: cannot read {excel_file}: {e}", err=True)
        sys.exit(1)
    logger.debug(f"Loaded sheets: {list(tables.keys())}")

    # 3) Map to an intake and collect issues
    notepad = create_notepad("intake")
    intake = mapper.apply_mapping(tables, notepad)

    # 4) Report any errors or warnings
    _report_issues(notepad)
    if intake is None or notepad.has_errors(include_subsections=True):
        sys.exit(1)

    # 5) Assess
    if not raw:
        click.echo(f"Patient: {intake.patient_ID}")
        if intake.follow_up is not None:
            click.echo(f"SCN1 (nadir): {intake.follow_up}")
    _print_assessment(assess(intake.observations, intake.follow_up), raw)


@main.command(name="matrix")
def matrix():
    """
    Print the PURK+ matrix (rows: SCN1 group, columns: PURK group).
    """
    header = ["SCN1 \\ PURK"] + [group.label for group in RiskGroup]
    click.echo("".join(f"{cell:<16}" for cell in header).rstrip())
    for scn1, combined in matrix_rows():
        cells = [scn1.label] + [group.label for group in combined]
        click.echo("".join(f"{cell:<16}" for cell in cells).rstrip())
    click.echo("")
    click.echo(f"SCN1 bands: {SCN1_BAND_TEXT}")


def _configure_logging(verbose: bool, log_file_path: typing.Optional[str]):
    # configure logging
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
        )


def _load_ontology(hpo_file: str) -> hpotk.MinimalOntology:
    # load ontology from JSON
    logger.info(f"Loading HPO from {pathlib.Path(hpo_file).name}")
    return hpotk.load_minimal_ontology(hpo_file)


def _report_issues(notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in intake:", err=True)
        for err in notepad.errors():
            click.echo(f"- {err}", err=True)
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in intake:", err=True)
        for w in notepad.warnings():
            click.echo(f"- {w}", err=True)


def _print_assessment(assessment: Assessment, raw: bool):
    if raw:
        click.echo(json.dumps(assessment.to_dict(), indent=2, ensure_ascii=False))
        return
    for line in assessment.summary_lines():
        if line.startswith("PURK+ group:") and assessment.purk_plus_group is RiskGroup.HIGH:
            click.echo(click.style(line, fg="red"))
        else:
            click.echo(line)


if __name__ == "__main__":
    main()
