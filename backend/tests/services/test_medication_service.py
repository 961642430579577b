"""Tests for medication date ranges and creation."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest

from petclaim.core.config import get_settings
from petclaim.db.session import get_sessionmaker
from petclaim.models import Medication, Pet, Profile
from petclaim.schemas.medication import MedicationCreate
from petclaim.services import medication_service

pytestmark = pytest.mark.asyncio

TODAY = date(2026, 3, 14)


def _medication(start: date, end: date | None) -> Medication:
    return Medication(medication_name="Carprofen", start_date=start, end_date=end)


async def test_single_day_medication_is_active_on_that_day() -> None:
    medication = _medication(TODAY, TODAY)
    assert medication_service.is_medication_active(medication, TODAY)
    assert medication_service.is_medication_active(
        medication, datetime(2026, 3, 14, 23, 59, tzinfo=UTC)
    )
    assert medication_service.is_medication_active(medication, "2026-03-14T08:00:00Z")
    assert not medication_service.is_medication_active(medication, TODAY + timedelta(days=1))
    assert not medication_service.is_medication_active(medication, TODAY - timedelta(days=1))


async def test_open_ended_medication_stays_active() -> None:
    medication = _medication(TODAY, None)
    assert medication_service.is_medication_active(medication, TODAY + timedelta(days=400))
    assert not medication_service.is_medication_active(medication, TODAY - timedelta(days=1))


async def test_range_is_inclusive_at_both_ends() -> None:
    medication = _medication(TODAY, TODAY + timedelta(days=6))
    assert medication_service.is_medication_active(medication, TODAY)
    assert medication_service.is_medication_active(medication, TODAY + timedelta(days=6))
    assert not medication_service.is_medication_active(medication, TODAY + timedelta(days=7))


async def _seed(session) -> tuple[Profile, Pet]:
    profile = Profile(email="meds@example.com", full_name="Casey Meds")
    session.add(profile)
    await session.flush()
    pet = Pet(user_id=profile.id, name="Pickles", species="cat")
    session.add(pet)
    await session.commit()
    return profile, pet


async def test_create_and_list_active_medications(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        profile, pet = await _seed(session)
        single_day = await medication_service.create_medication(
            session,
            MedicationCreate(
                user_id=profile.id,
                pet_id=pet.id,
                medication_name="Cerenia",
                reminder_times=["08:00"],
                start_date=TODAY,
                end_date=TODAY,
            ),
        )
        await medication_service.create_medication(
            session,
            MedicationCreate(
                user_id=profile.id,
                pet_id=pet.id,
                medication_name="Finished course",
                start_date=TODAY - timedelta(days=10),
                end_date=TODAY - timedelta(days=3),
            ),
        )

        active = await medication_service.list_active_medications(
            session, user_id=profile.id, today=TODAY
        )
        everything = await medication_service.list_medications(session, user_id=profile.id)

    assert [med.id for med in active] == [single_day.id]
    assert len(everything) == 2
    assert single_day.reminder_times == ["08:00"]


async def test_create_medication_rejects_bad_input(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        profile, pet = await _seed(session)
        with pytest.raises(ValueError, match="End date cannot precede start date"):
            await medication_service.create_medication(
                session,
                MedicationCreate(
                    user_id=profile.id,
                    pet_id=pet.id,
                    medication_name="Backwards",
                    start_date=TODAY,
                    end_date=TODAY - timedelta(days=1),
                ),
            )
        other = Profile(email="other@example.com")
        session.add(other)
        await session.commit()
        with pytest.raises(ValueError, match="Pet not found for user"):
            await medication_service.create_medication(
                session,
                MedicationCreate(
                    user_id=other.id,
                    pet_id=pet.id,
                    medication_name="Not mine",
                    start_date=TODAY,
                ),
            )


async def test_reminder_times_must_be_clock_times() -> None:
    with pytest.raises(ValueError):
        MedicationCreate(
            user_id=uuid.uuid4(),
            pet_id=uuid.uuid4(),
            medication_name="Bad time",
            reminder_times=["9am"],
            start_date=TODAY,
        )


async def test_reminder_times_are_read_in_reminder_timezone(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("REMINDER_TIMEZONE", "America/Los_Angeles")
    get_settings.cache_clear()

    # Late evening Pacific is already the next day in UTC.
    late = datetime(2026, 3, 15, 5, 30, tzinfo=UTC)
    assert medication_service.local_today(late) == date(2026, 3, 14)
    assert medication_service.local_reminder_datetime(date(2026, 1, 10), "09:00") == datetime(
        2026, 1, 10, 17, 0, tzinfo=UTC
    )
    assert medication_service.local_reminder_datetime(TODAY, "09:00") == datetime(
        2026, 3, 14, 16, 0, tzinfo=UTC
    )

    monkeypatch.setenv("REMINDER_TIMEZONE", "UTC")
    get_settings.cache_clear()
    assert medication_service.local_today(late) == date(2026, 3, 15)
    get_settings.cache_clear()
