"""ORM models package export."""

from petclaim.models.claim import Claim, ClaimItem, FilingStatus
from petclaim.models.medication import (
    DoseStatus,
    Medication,
    MedicationDose,
    MedicationReminderLog,
)
from petclaim.models.pet import NULLABLE_TEXT_FIELDS, Pet
from petclaim.models.profile import Profile

__all__ = [
    "Claim",
    "ClaimItem",
    "DoseStatus",
    "FilingStatus",
    "Medication",
    "MedicationDose",
    "MedicationReminderLog",
    "NULLABLE_TEXT_FIELDS",
    "Pet",
    "Profile",
]
