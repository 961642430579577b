"""Test fixtures for the Pet Claim Helper back office."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import UTC, date, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SMS_PROVIDER", "echo")

from petclaim.core.config import get_settings
from petclaim.db.base import Base
from petclaim.db.session import dispose_engine, get_sessionmaker
from petclaim.main import app
from petclaim.models import Medication, Pet, Profile
from petclaim.services import dose_token_service


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    os.environ.pop("DATABASE_ANON_URL", None)
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


async def _seed_owner(
    session,
    *,
    email: str = "owner@example.com",
    phone: str | None = "3123050403",
    pet_name: str = "Biscuit",
) -> tuple[Profile, Pet]:
    profile = Profile(email=email, full_name="Taylor Test", phone=phone, sms_opt_in=True)
    session.add(profile)
    await session.flush()
    pet = Pet(user_id=profile.id, name=pet_name, species="dog")
    session.add(pet)
    await session.commit()
    return profile, pet


async def _seed_medication(
    session,
    profile: Profile,
    pet: Pet,
    *,
    start: date | None = None,
    end: date | None = None,
    name: str = "Apoquel",
) -> Medication:
    today = datetime.now(UTC).date()
    medication = Medication(
        user_id=profile.id,
        pet_id=pet.id,
        medication_name=name,
        dosage="16mg",
        frequency="Once daily",
        reminder_times=["09:00"],
        start_date=start or today,
        end_date=end,
    )
    session.add(medication)
    await session.commit()
    await session.refresh(medication)
    return medication


@pytest_asyncio.fixture()
async def dose_context(reset_database: None, db_url: str) -> dict[str, object]:
    """Seed an owner, a pet, a medication and one freshly issued dose."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        profile, pet = await _seed_owner(session)
        medication = await _seed_medication(session, profile, pet)
        dose = await dose_token_service.issue_dose(
            session, medication, datetime.now(UTC) + timedelta(minutes=5)
        )
    return {
        "sessionmaker": sessionmaker,
        "profile_id": profile.id,
        "pet_id": pet.id,
        "medication_id": medication.id,
        "dose_id": dose.id,
        "token": dose.one_time_token,
        "short_code": dose.short_code,
    }


@pytest_asyncio.fixture()
async def client(reset_database: None) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
