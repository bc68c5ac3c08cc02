"""
Assessment domain model.

Runs the PURK → SCN1 → PURK+ pipeline once and keeps every intermediate result.
"""

import math
import typing
from dataclasses import dataclass

from .matrix import purk_plus_risk
from .purk import PresentationObservations, calculate_purk_score, purk_risk_group
from .risk import RiskGroup, label_of
from .scn1 import scn1_group_for_reading
from .units import CreatinineReading, NormalizedCreatinine

INCOMPLETE_MESSAGE = "Enter SCN1 to calculate the combined PURK+ risk."


@dataclass(frozen=True)
class Assessment:
    """
    Result of one evaluation.

    Attributes:
        observations: Inputs at initial presentation.
        follow_up: SCN1 reading, or None if not yet available.
        purk_score: Points 0–6.
        purk_group: Risk group at presentation.
        scn1_group: Risk group at one year, or None (undefined).
        purk_plus_group: Combined risk, or None (undefined).
    """

    observations: PresentationObservations
    follow_up: typing.Optional[CreatinineReading]
    purk_score: int
    purk_group: RiskGroup
    scn1_group: typing.Optional[RiskGroup]
    purk_plus_group: typing.Optional[RiskGroup]

    @property
    def is_complete(self) -> bool:
        return self.purk_plus_group is not None

    @property
    def scn1_normalized(self) -> typing.Optional[NormalizedCreatinine]:
        return None if self.follow_up is None else self.follow_up.normalized()

    def to_dict(self) -> dict[str, typing.Any]:
        """JSON-ready view; undefined groups and NaN values become None."""
        creatinine = self.observations.creatinine_72h
        return {
            "purk": {
                "creatinine_72h": _reading_dict(creatinine),
                "failure_to_thrive": self.observations.failure_to_thrive,
                "high_grade_vur": self.observations.high_grade_vur,
                "renal_dysplasia": self.observations.renal_dysplasia,
                "score": self.purk_score,
                "group": label_of(self.purk_group),
            },
            "scn1": {
                "reading": _reading_dict(self.follow_up),
                "group": label_of(self.scn1_group),
            },
            "purk_plus": {
                "group": label_of(self.purk_plus_group),
            },
        }

    def summary_lines(self) -> list[str]:
        lines = [
            f"PURK score:      {self.purk_score}",
            f"PURK group:      {self.purk_group.label}",
            f"SCN1 group:      {label_of(self.scn1_group) or 'undefined'}",
        ]
        if self.is_complete:
            lines.append(f"PURK+ group:     {self.purk_plus_group.label}")
        else:
            lines.append("PURK+ group:     undefined")
            lines.append(INCOMPLETE_MESSAGE)
        return lines


def assess(
    observations: PresentationObservations,
    follow_up: typing.Optional[CreatinineReading] = None,
) -> Assessment:
    score = calculate_purk_score(observations)
    purk_group = purk_risk_group(score)
    scn1_group = scn1_group_for_reading(follow_up)
    return Assessment(
        observations=observations,
        follow_up=follow_up,
        purk_score=score,
        purk_group=purk_group,
        scn1_group=scn1_group,
        purk_plus_group=purk_plus_risk(purk_group, scn1_group),
    )


def _finite_or_none(value: float) -> typing.Optional[float]:
    return value if math.isfinite(value) else None


def _reading_dict(reading: typing.Optional[CreatinineReading]) -> typing.Optional[dict[str, typing.Any]]:
    if reading is None:
        return None
    normalized = reading.normalized()
    return {
        "value": _finite_or_none(reading.value),
        "unit": reading.unit.label,
        "mgdl": _finite_or_none(normalized.mgdl),
        "umol": _finite_or_none(normalized.umol),
    }
