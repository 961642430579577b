"""Medication services."""
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from petclaim.core.config import get_settings
from petclaim.models import Medication, Pet
from petclaim.schemas.medication import MedicationCreate

logger = logging.getLogger(__name__)


def reminder_zone() -> ZoneInfo:
    """Return the zone reminder times and medication dates are read in."""
    name = get_settings().reminder_timezone
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:  # pragma: no cover - depends on system tz database
        logger.warning("Unknown reminder timezone %r; using UTC", name)
        return ZoneInfo("UTC")


def local_today(now: datetime | None = None) -> date:
    """Calendar day in the reminder zone."""
    current = now if now is not None else datetime.now(UTC)
    return current.astimezone(reminder_zone()).date()


def local_reminder_datetime(day: date, reminder_time: str) -> datetime:
    """Combine ``day`` and an ``HH:MM`` reminder time as a UTC instant."""
    hour, minute = (int(part) for part in reminder_time.split(":"))
    local = datetime.combine(day, time(hour, minute), tzinfo=reminder_zone())
    return local.astimezone(UTC)


def _as_day(value: date | datetime | str) -> date:
    """Reduce ``value`` to a calendar day, ignoring any time or zone."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def is_medication_active(
    medication: Medication, today: date | datetime | str
) -> bool:
    """Return True when ``today`` falls within the medication's date range.

    Both ends are inclusive by day; a missing end date means ongoing.
    """
    day = _as_day(today)
    start = _as_day(medication.start_date)
    if day < start:
        return False
    if medication.end_date is None:
        return True
    return day <= _as_day(medication.end_date)


async def list_medications(
    session: AsyncSession, *, user_id: uuid.UUID
) -> list[Medication]:
    stmt: Select[tuple[Medication]] = (
        select(Medication)
        .options(selectinload(Medication.pet))
        .where(Medication.user_id == user_id)
        .order_by(Medication.start_date, Medication.medication_name)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_active_medications(
    session: AsyncSession, *, user_id: uuid.UUID, today: date | datetime | str
) -> list[Medication]:
    medications = await list_medications(session, user_id=user_id)
    return [med for med in medications if is_medication_active(med, today)]


async def create_medication(
    session: AsyncSession, payload: MedicationCreate
) -> Medication:
    pet = await session.get(Pet, payload.pet_id)
    if pet is None or pet.user_id != payload.user_id:
        raise ValueError("Pet not found for user")
    if payload.end_date is not None and payload.end_date < payload.start_date:
        raise ValueError("End date cannot precede start date")
    medication = Medication(
        user_id=payload.user_id,
        pet_id=payload.pet_id,
        medication_name=payload.medication_name,
        dosage=payload.dosage,
        frequency=payload.frequency,
        reminder_times=list(payload.reminder_times) or None,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    session.add(medication)
    await session.commit()
    await session.refresh(medication)
    return medication
