"""
PURK scoring.

Point score from the four variables available at initial presentation and its
mapping into a three-band risk group.
"""

import logging
import math
import re
import typing
from dataclasses import dataclass

from .risk import RiskGroup
from .units import CreatinineReading

logger = logging.getLogger(__name__)

# >150 µmol/L (strictly greater) scores points, 150 itself does not
PURK_CREATININE_THRESHOLD_UMOL = 150.0

CREATININE_POINTS = 2
FAILURE_TO_THRIVE_POINTS = 2
HIGH_GRADE_VUR_POINTS = 1
RENAL_DYSPLASIA_POINTS = 1

MAX_PURK_SCORE = (
    CREATININE_POINTS
    + FAILURE_TO_THRIVE_POINTS
    + HIGH_GRADE_VUR_POINTS
    + RENAL_DYSPLASIA_POINTS
)

# Lower edges of each band (closed)
PURK_HIGH_MIN_SCORE = 4
PURK_INTERMEDIATE_MIN_SCORE = 2

_ROMAN_GRADES = {"i": 1, "ii": 2, "iii": 3, "iv": 4, "v": 5}
_GRADE_PATTERN = re.compile(r"^(?:grade\s*)?(?P<grade>[ivx]+|\d+)$", re.IGNORECASE)


@dataclass(frozen=True)
class PresentationObservations:
    """
    Variables collected at initial presentation.

    Attributes:
        creatinine_72h: Serum creatinine taken >72h after birth, or None if unknown.
        failure_to_thrive: Poor weight gain or growth below expected ranges.
        high_grade_vur: Vesicoureteral reflux grade III–V on VCUG.
        renal_dysplasia: Abnormal renal development on ultrasound.
    """

    creatinine_72h: typing.Optional[CreatinineReading] = None
    failure_to_thrive: bool = False
    high_grade_vur: bool = False
    renal_dysplasia: bool = False


def calculate_purk_score(observations: PresentationObservations) -> int:
    """
    Add up the PURK points (0–6). Each item contributes independently:
      - creatinine >150 µmol/L: +2 (absent or NaN reading: +0)
      - failure to thrive: +2
      - high-grade VUR: +1
      - renal dysplasia: +1
    """
    score = 0

    if observations.creatinine_72h is not None:
        umol = observations.creatinine_72h.umol
        # NaN compares false, so an unreadable value adds nothing
        if umol > PURK_CREATININE_THRESHOLD_UMOL:
            score += CREATININE_POINTS

    if observations.failure_to_thrive:
        score += FAILURE_TO_THRIVE_POINTS
    if observations.high_grade_vur:
        score += HIGH_GRADE_VUR_POINTS
    if observations.renal_dysplasia:
        score += RENAL_DYSPLASIA_POINTS

    logger.debug(f"PURK score {score} from {observations}")
    return score


def purk_risk_group(score: int) -> RiskGroup:
    if score >= PURK_HIGH_MIN_SCORE:
        return RiskGroup.HIGH
    if score >= PURK_INTERMEDIATE_MIN_SCORE:
        return RiskGroup.INTERMEDIATE
    return RiskGroup.LOW


def parse_vur_grade(grade: typing.Any) -> typing.Optional[int]:
    """
    Read a reflux grade written as 3, 4.0, "3", "III" or "grade IV".
    Returns None for blanks, NaN and anything outside I–V.
    """
    if grade is None or isinstance(grade, bool):
        return None
    if isinstance(grade, (int, float)):
        if not math.isfinite(grade) or grade != int(grade):
            return None
        number = int(grade)
    else:
        m = _GRADE_PATTERN.match(str(grade).strip())
        if not m:
            return None
        token = m.group("grade").lower()
        if token.isdigit():
            number = int(token)
        else:
            number = _ROMAN_GRADES.get(token, 0)
    return number if 1 <= number <= 5 else None


def is_high_grade_vur(grade: typing.Any) -> bool:
    # grades III–V on VCUG
    number = parse_vur_grade(grade)
    return number is not None and number >= 3
