"""
Creatinine units.

Defines the two supported creatinine units, the CreatinineReading value type
and the fixed mg/dL ⇄ µmol/L conversion.
"""

import math
from dataclasses import dataclass
from enum import Enum

# 1 mg/dL creatinine = 88.4 µmol/L
UMOL_PER_MGDL = 88.4


class Unit(Enum):
    """
    Creatinine concentration units.
    MG_DL is the mass representation, UMOL_L the molar one.
    """
    MG_DL = "mg/dL"
    UMOL_L = "µmol/L"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> "Unit":
        """
        Convert a human‑readable unit label into the corresponding enum.
        Accepts micro sign, greek mu or a plain "u" and ignores casing/spaces.
        """
        key = str(label).strip().lower().replace(" ", "").replace("μ", "µ")
        mapping = {
            "mg/dl": cls.MG_DL,
            "mgdl": cls.MG_DL,
            "mg": cls.MG_DL,
            "µmol/l": cls.UMOL_L,
            "umol/l": cls.UMOL_L,
            "umol": cls.UMOL_L,
            "µmol": cls.UMOL_L,
            "micromol/l": cls.UMOL_L,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown creatinine unit label: {label!r}")


def mgdl_to_umol(mgdl: float) -> float:
    return mgdl * UMOL_PER_MGDL


def umol_to_mgdl(umol: float) -> float:
    return umol / UMOL_PER_MGDL


@dataclass(frozen=True)
class NormalizedCreatinine:
    """
    One creatinine value expressed in both units.
    Both fields are NaN when the source value was not finite.
    """

    mgdl: float
    umol: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.mgdl) and math.isfinite(self.umol)


def normalize_creatinine(value: float, unit: Unit) -> NormalizedCreatinine:
    """
    Express `value` (given in `unit`) in both mg/dL and µmol/L.

    Non-finite input (NaN, ±inf) never raises: both outputs become NaN so that
    every later comparison evaluates false. No rounding is applied.
    """
    if not math.isfinite(value):
        return NormalizedCreatinine(mgdl=math.nan, umol=math.nan)
    if unit is Unit.MG_DL:
        return NormalizedCreatinine(mgdl=value, umol=mgdl_to_umol(value))
    return NormalizedCreatinine(mgdl=umol_to_mgdl(value), umol=value)


@dataclass(frozen=True)
class CreatinineReading:
    """
    A measured serum creatinine value paired with its unit.

    Attributes:
        value: Measured value; NaN stands for an unreadable entry.
        unit: Unit the value was recorded in.
    """

    value: float
    unit: Unit = Unit.MG_DL

    def normalized(self) -> NormalizedCreatinine:
        return normalize_creatinine(self.value, self.unit)

    @property
    def mgdl(self) -> float:
        return self.normalized().mgdl

    @property
    def umol(self) -> float:
        return self.normalized().umol

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit.label}"
