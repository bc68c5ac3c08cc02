"""
Phenotype domain model.

Defines the Phenotype class for HPO term annotations recorded at presentation.
"""

import re
from dataclasses import dataclass

# Patterns
_VALID_ID = re.compile(r"^[A-Za-z0-9_-]+$")
_HPO_ID_PATTERN = re.compile(r"^HP:\d{7}$")


@dataclass(frozen=True)
class Phenotype:
    """
    Represents a single HPO annotation for a patient.

    Attributes:
        patient_ID: Alphanumeric patient identifier.
        HPO_ID: HPO term identifier in CURIE form (“HP:0001508”).
        status: True if observed, False if excluded.
        label: Optional term label as written in the workbook.
    """

    patient_ID: str
    HPO_ID: str
    status: bool
    label: str = ""

    def __post_init__(self):
        # Validate patient ID
        if not _VALID_ID.match(self.patient_ID):
            raise ValueError(f"Invalid patient ID: {self.patient_ID!r}")

        # Validate HPO ID
        if not _HPO_ID_PATTERN.match(self.HPO_ID):
            raise ValueError(f"Invalid HPO ID: {self.HPO_ID!r}")

        # Validate status
        if not isinstance(self.status, bool):
            raise ValueError(
                f"status must be a boolean, got {type(self.status).__name__}"
            )
