"""
Risk group domain model.

Defines the ordinal RiskGroup enumeration shared by PURK, SCN1 and PURK+.
"""

import functools
import typing
from enum import Enum


@functools.total_ordering
class RiskGroup(Enum):
    """
    Ordinal risk bands, ordered LOW < INTERMEDIATE < HIGH.
    "Undefined" is never a member; functions return None for it.
    """
    LOW = 0
    INTERMEDIATE = 1
    HIGH = 2

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskGroup):
            return NotImplemented
        return self.value < other.value

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> "RiskGroup":
        """
        Convert "Low", "intermediate", "HIGH" ... into the corresponding enum.
        """
        key = str(label).strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown risk group label: {label!r}")


def label_of(group: typing.Optional[RiskGroup]) -> typing.Optional[str]:
    # None stays None so JSON output keeps "undefined" distinct from "Low"
    return None if group is None else group.label
