"""
PURK+ pediatric kidney risk calculator.

PURK scores four variables at initial presentation, SCN1 groups the first-year
creatinine nadir, and the PURK+ matrix combines the two groups.
"""

from .assessment import Assessment, assess
from .matrix import PURK_PLUS_MATRIX, purk_plus_risk
from .purk import PresentationObservations, calculate_purk_score, purk_risk_group
from .risk import RiskGroup
from .scn1 import nadir, scn1_risk_group
from .units import CreatinineReading, NormalizedCreatinine, Unit, normalize_creatinine

__version__ = "0.1.0"

__all__ = [
    "Assessment",
    "assess",
    "PURK_PLUS_MATRIX",
    "purk_plus_risk",
    "PresentationObservations",
    "calculate_purk_score",
    "purk_risk_group",
    "RiskGroup",
    "nadir",
    "scn1_risk_group",
    "CreatinineReading",
    "NormalizedCreatinine",
    "Unit",
    "normalize_creatinine",
]
