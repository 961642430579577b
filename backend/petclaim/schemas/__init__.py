"""Schema exports."""

from petclaim.schemas.dose import (
    DoseConfirmRequest,
    DoseLinkView,
    DoseMedicationSummary,
    DosePetSummary,
    DoseRead,
)
from petclaim.schemas.medication import (
    MedicationBase,
    MedicationCreate,
    MedicationRead,
)

__all__ = [
    "DoseConfirmRequest",
    "DoseLinkView",
    "DoseMedicationSummary",
    "DosePetSummary",
    "DoseRead",
    "MedicationBase",
    "MedicationCreate",
    "MedicationRead",
]
