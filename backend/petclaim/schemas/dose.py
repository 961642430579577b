"""Dose confirmation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from petclaim.models import DoseStatus


class DosePetSummary(BaseModel):
    id: uuid.UUID
    name: str
    species: str

    model_config = ConfigDict(from_attributes=True)


class DoseMedicationSummary(BaseModel):
    id: uuid.UUID
    medication_name: str
    dosage: str | None = None
    frequency: str | None = None
    reminder_times: list[str] | None = None

    model_config = ConfigDict(from_attributes=True)


class DoseRead(BaseModel):
    """Dose as shown behind a confirmation link."""

    id: uuid.UUID
    medication_id: uuid.UUID
    status: DoseStatus
    scheduled_time: datetime
    given_time: datetime | None = None
    token_expires_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class DoseLinkView(BaseModel):
    dose: DoseRead
    medication: DoseMedicationSummary
    pet: DosePetSummary


class DoseConfirmRequest(BaseModel):
    token: str | None = Field(default=None, min_length=6, max_length=64)
    short_code: str | None = Field(default=None, min_length=6, max_length=16)
