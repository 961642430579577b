"""Medication, dose and SMS operations."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from petclaim.admin.accounts import find_profile_by_email
from petclaim.admin.registry import AdminOperationError, NoInput, admin_operation
from petclaim.models import Medication, MedicationDose, MedicationReminderLog
from petclaim.schemas.medication import MedicationCreate, MedicationRead
from petclaim.security.redact import mask_token
from petclaim.services import dose_token_service, medication_service, sms_service


class SeedMedicationInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3)
    pet_name: str = Field(min_length=1)
    medication_name: str = "Test Medication"
    dosage: str = "1 tablet"
    reminder_time: str = Field(default="09:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    day: date | None = None
    send_sms: bool = False


class TokenInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: str = Field(min_length=1)


class SMSCheckInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phone: str = ""
    message: str = "Test message from Pet Claim Helper"


class DuplicateRemindersInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    days: int = Field(default=7, ge=1, le=365)


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


@admin_operation("create-test-medication", input_model=SeedMedicationInput)
async def create_test_medication(
    session: AsyncSession, params: SeedMedicationInput
) -> dict[str, Any]:
    """Create a single-day medication and issue one dose link for it."""
    profile = await find_profile_by_email(session, params.email)
    if profile is None:
        raise AdminOperationError(f"No profile found for {params.email}")
    pet = next(
        (p for p in profile.pets if p.name.lower() == params.pet_name.strip().lower()),
        None,
    )
    if pet is None:
        raise AdminOperationError(f"No pet named {params.pet_name} for {params.email}")

    day = params.day or medication_service.local_today()
    medication = await medication_service.create_medication(
        session,
        MedicationCreate(
            user_id=profile.id,
            pet_id=pet.id,
            medication_name=params.medication_name,
            dosage=params.dosage,
            frequency="Once daily",
            reminder_times=[params.reminder_time],
            start_date=day,
            end_date=day,
        ),
    )
    scheduled = medication_service.local_reminder_datetime(day, params.reminder_time)
    dose = await dose_token_service.issue_dose(session, medication, scheduled)
    link = dose_token_service.build_dose_link(dose.short_code)

    result: dict[str, Any] = {
        "medication": MedicationRead.model_validate(medication).model_dump(mode="json"),
        "dose_id": str(dose.id),
        "short_code": dose.short_code,
        "link": link,
        "token_expires_at": _iso(dose.token_expires_at),
        "active_today": medication_service.is_medication_active(medication, day),
    }
    if params.send_sms:
        message = dose_token_service.build_reminder_message(
            pet.name, medication.medication_name, link
        )
        sms = await sms_service.send_sms(profile.phone, message)
        result["sms"] = sms.to_dict()
    return result


@admin_operation("debug-token", input_model=TokenInput)
async def debug_token(session: AsyncSession, params: TokenInput) -> dict[str, Any]:
    """Show the raw dose behind a token or short code and how it validates."""
    dose = (
        await session.execute(
            select(MedicationDose)
            .options(
                selectinload(MedicationDose.medication).selectinload(Medication.pet)
            )
            .where(
                (MedicationDose.one_time_token == params.token)
                | (MedicationDose.short_code == params.token)
            )
        )
    ).scalar_one_or_none()
    if dose is None:
        return {"found": False, "token": mask_token(params.token)}

    now = datetime.now(UTC)
    expires_at = dose.token_expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    if dose.one_time_token == params.token:
        lookup = await dose_token_service.lookup_dose_by_token(session, params.token, now=now)
    else:
        lookup = await dose_token_service.lookup_dose_by_short_code(
            session, params.token, now=now
        )
    medication = dose.medication
    return {
        "found": True,
        "dose": {
            "id": str(dose.id),
            "status": dose.status.value,
            "scheduled_time": _iso(dose.scheduled_time),
            "given_time": _iso(dose.given_time),
            "token_expires_at": _iso(dose.token_expires_at),
            "short_code": dose.short_code,
        },
        "now": now.isoformat(),
        "expired": expires_at is None or expires_at <= now,
        "outcome": lookup.outcome.value,
        "medication_name": medication.medication_name if medication else None,
        "pet_name": medication.pet.name if medication and medication.pet else None,
    }


@admin_operation("expire-doses")
async def expire_doses(session: AsyncSession, params: NoInput) -> dict[str, Any]:
    """Mark pending doses with lapsed tokens as expired."""
    expired = await dose_token_service.expire_stale_doses(session)
    return {"expired": expired}


@admin_operation("send-test-sms", input_model=SMSCheckInput)
async def send_test_sms(session: AsyncSession, params: SMSCheckInput) -> dict[str, Any]:
    """Send one SMS through the configured provider."""
    result = await sms_service.send_sms(params.phone, params.message)
    return result.to_dict()


@admin_operation("count-duplicate-reminders", input_model=DuplicateRemindersInput)
async def count_duplicate_reminders(
    session: AsyncSession, params: DuplicateRemindersInput
) -> dict[str, Any]:
    """Find medications reminded more than once on the same day."""
    since = medication_service.local_today() - timedelta(days=params.days)
    sends = func.count(MedicationReminderLog.id)
    result = await session.execute(
        select(
            MedicationReminderLog.medication_id,
            MedicationReminderLog.reminder_date,
            sends,
        )
        .where(MedicationReminderLog.reminder_date >= since)
        .group_by(MedicationReminderLog.medication_id, MedicationReminderLog.reminder_date)
        .having(sends > 1)
        .order_by(MedicationReminderLog.reminder_date, MedicationReminderLog.medication_id)
    )
    duplicates = [
        {
            "medication_id": str(medication_id),
            "reminder_date": reminder_date.isoformat(),
            "sends": count,
        }
        for medication_id, reminder_date, count in result.all()
    ]
    return {"since": since.isoformat(), "duplicates": duplicates, "total": len(duplicates)}
