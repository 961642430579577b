"""Medication schemas."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class MedicationBase(BaseModel):
    """Shared medication fields."""

    medication_name: str = Field(min_length=1, max_length=240)
    dosage: str | None = None
    frequency: str | None = None
    reminder_times: list[str] = Field(default_factory=list)
    start_date: date
    end_date: date | None = None

    @field_validator("reminder_times")
    @classmethod
    def _check_times(cls, value: list[str]) -> list[str]:
        for item in value:
            if not _TIME_RE.match(item):
                raise ValueError(f"Invalid reminder time {item!r}; expected HH:MM")
        return value


class MedicationCreate(MedicationBase):
    """Payload for creating a medication."""

    user_id: uuid.UUID
    pet_id: uuid.UUID


class MedicationRead(MedicationBase):
    """Serialized medication."""

    id: uuid.UUID
    user_id: uuid.UUID
    pet_id: uuid.UUID
    reminder_times: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
