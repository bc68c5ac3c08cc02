"""
SCN1 grouping.

Classifies the first-year serum creatinine nadir (SCN1) into a risk group, and
picks that nadir out of a series of readings.
"""

import logging
import math
import typing

from .risk import RiskGroup
from .units import CreatinineReading, Unit, normalize_creatinine

logger = logging.getLogger(__name__)

SCN1_HIGH_MGDL = 1.0
SCN1_INTERMEDIATE_MGDL = 0.4

# Observation window for the nadir: the first year of life
SCN1_WINDOW_DAYS = 365

SCN1_BAND_TEXT = (
    "Low <0.4 mg/dL (<35 µmol/L) · Intermediate 0.4–0.99 mg/dL (35–88 µmol/L) · "
    "High ≥1.0 mg/dL (≥88 µmol/L)"
)


def scn1_risk_group(
    value: typing.Optional[float], unit: Unit = Unit.MG_DL
) -> typing.Optional[RiskGroup]:
    """
    Map an SCN1 value to a risk group, using mg/dL cut-points:
      - >= 1.0       → HIGH
      - 0.4 .. <1.0  → INTERMEDIATE
      - 0 .. <0.4    → LOW
    Returns None (undefined) for a missing or non-finite value and for a
    negative concentration. None must not be read as LOW.
    """
    if value is None:
        return None
    mgdl = normalize_creatinine(value, unit).mgdl
    if not math.isfinite(mgdl):
        return None
    if mgdl >= SCN1_HIGH_MGDL:
        return RiskGroup.HIGH
    if mgdl >= SCN1_INTERMEDIATE_MGDL:
        return RiskGroup.INTERMEDIATE
    if mgdl >= 0:
        return RiskGroup.LOW
    logger.debug(f"Negative SCN1 value {value!r} {unit.label} left unclassified")
    return None


def scn1_group_for_reading(reading: typing.Optional[CreatinineReading]) -> typing.Optional[RiskGroup]:
    if reading is None:
        return None
    return scn1_risk_group(reading.value, reading.unit)


def nadir(
    readings: typing.Iterable[typing.Tuple[float, CreatinineReading]],
    max_age_days: float = SCN1_WINDOW_DAYS,
) -> typing.Optional[CreatinineReading]:
    """
    Return the lowest reading (compared in mg/dL) among (age_days, reading) pairs
    taken within the first `max_age_days` days. Readings with unknown age or a
    non-finite value are skipped; on equal values the first one listed wins.
    Returns None when nothing qualifies.
    """
    best: typing.Optional[CreatinineReading] = None
    best_mgdl = math.inf
    for age_days, reading in readings:
        if age_days is None or not math.isfinite(age_days) or age_days > max_age_days:
            logger.debug(f"Skipping reading {reading} at day {age_days!r}: outside window")
            continue
        mgdl = reading.mgdl
        if not math.isfinite(mgdl):
            continue
        if mgdl < best_mgdl:
            best, best_mgdl = reading, mgdl
    return best
