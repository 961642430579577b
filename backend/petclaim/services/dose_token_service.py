"""One-time dose confirmation tokens."""

from __future__ import annotations

import enum
import logging
import secrets
import string
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, selectinload

from petclaim.core.config import get_settings
from petclaim.db.policies import bind_dose_credential
from petclaim.models import DoseStatus, Medication, MedicationDose
from petclaim.security.redact import mask_token

logger = logging.getLogger(__name__)

SHORT_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
SHORT_CODE_LENGTH = 8


class DoseLookupOutcome(str, enum.Enum):
    """Result of validating a dose credential."""

    VALID = "valid"
    EXPIRED = "expired"
    # Wrong credential and already-consumed credential look the same.
    NOT_FOUND = "not_found"


@dataclass(slots=True)
class DoseLookup:
    outcome: DoseLookupOutcome
    dose: MedicationDose | None = None

    @property
    def is_valid(self) -> bool:
        return self.outcome is DoseLookupOutcome.VALID


def _coerce_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _now(now: datetime | None) -> datetime:
    return _coerce_utc(now) if now is not None else datetime.now(UTC)


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Return a random code over ``[A-Za-z0-9]`` for SMS links."""
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def build_dose_link(short_code: str) -> str:
    base = get_settings().dose_link_base_url.rstrip("/")
    return f"{base}/{short_code}"


def build_reminder_message(
    pet_name: str | None, medication_name: str | None, link: str
) -> str:
    pet = pet_name or "your pet"
    med = medication_name or "medication"
    return (
        f"Time to give {pet} their {med}! Tap to mark as given: {link} "
        "Reply HELP for help."
    )


async def _short_code_taken(session: AsyncSession, candidate: str) -> bool:
    result = await session.execute(
        select(MedicationDose.id).where(MedicationDose.short_code == candidate)
    )
    return result.first() is not None


async def _generate_unique_short_code(session: AsyncSession) -> str:
    for _ in range(5):
        candidate = generate_short_code()
        if not await _short_code_taken(session, candidate):
            return candidate
    raise RuntimeError("Failed to generate unique dose short code")


async def issue_dose(
    session: AsyncSession,
    medication: Medication,
    scheduled_time: datetime,
    *,
    ttl: timedelta | None = None,
    now: datetime | None = None,
) -> MedicationDose:
    """Create a pending dose carrying a fresh token, short code and expiry."""

    issued_at = _now(now)
    if ttl is None:
        ttl = timedelta(hours=get_settings().dose_token_ttl_hours)
    dose = MedicationDose(
        medication_id=medication.id,
        user_id=medication.user_id,
        scheduled_time=_coerce_utc(scheduled_time),
        status=DoseStatus.PENDING,
        one_time_token=str(uuid.uuid4()),
        token_expires_at=issued_at + ttl,
        short_code=await _generate_unique_short_code(session),
    )
    session.add(dose)
    await session.commit()
    await session.refresh(dose)
    logger.info(
        "Issued dose %s for medication %s (short code %s)",
        dose.id,
        medication.id,
        dose.short_code,
    )
    return dose


async def _lookup_pending(
    session: AsyncSession,
    column: InstrumentedAttribute,
    value: str | None,
    now: datetime | None,
) -> DoseLookup:
    if not value:
        return DoseLookup(DoseLookupOutcome.NOT_FOUND)
    await bind_dose_credential(session, value)
    result = await session.execute(
        select(MedicationDose)
        .options(
            selectinload(MedicationDose.medication).selectinload(Medication.pet)
        )
        .where(column == value, MedicationDose.status == DoseStatus.PENDING)
        .execution_options(populate_existing=True)
    )
    dose = result.scalar_one_or_none()
    if dose is None:
        return DoseLookup(DoseLookupOutcome.NOT_FOUND)
    expires_at = dose.token_expires_at
    if expires_at is None or _coerce_utc(expires_at) <= _now(now):
        return DoseLookup(DoseLookupOutcome.EXPIRED, dose)
    return DoseLookup(DoseLookupOutcome.VALID, dose)


async def lookup_dose_by_token(
    session: AsyncSession, token: str | None, *, now: datetime | None = None
) -> DoseLookup:
    """Find the pending dose for ``token`` and check its expiry; read only."""
    return await _lookup_pending(session, MedicationDose.one_time_token, token, now)


async def lookup_dose_by_short_code(
    session: AsyncSession, short_code: str | None, *, now: datetime | None = None
) -> DoseLookup:
    return await _lookup_pending(session, MedicationDose.short_code, short_code, now)


async def _confirm_where(
    session: AsyncSession,
    column: InstrumentedAttribute,
    value: str | None,
    now: datetime | None,
) -> DoseLookup:
    if not value:
        return DoseLookup(DoseLookupOutcome.NOT_FOUND)
    confirmed_at = _now(now)
    await bind_dose_credential(session, value)
    stmt = (
        update(MedicationDose)
        .where(
            column == value,
            MedicationDose.status == DoseStatus.PENDING,
            MedicationDose.token_expires_at > confirmed_at,
        )
        .values(
            status=DoseStatus.CONFIRMED,
            given_time=confirmed_at,
            updated_at=confirmed_at,
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    await session.commit()
    if result.rowcount != 1:
        # Zero rows: consumed, wrong or expired. Classify without mutating.
        lookup = await _lookup_pending(session, column, value, confirmed_at)
        if lookup.outcome is DoseLookupOutcome.VALID:  # pragma: no cover - race
            return DoseLookup(DoseLookupOutcome.NOT_FOUND)
        logger.info(
            "Dose confirmation rejected for %s: %s",
            mask_token(value),
            lookup.outcome.value,
        )
        return lookup

    await bind_dose_credential(session, value)
    dose = (
        await session.execute(
            select(MedicationDose)
            .options(
                selectinload(MedicationDose.medication).selectinload(Medication.pet)
            )
            .where(column == value)
            .execution_options(populate_existing=True)
        )
    ).scalar_one()
    logger.info("Dose %s confirmed", dose.id)
    return DoseLookup(DoseLookupOutcome.VALID, dose)


async def confirm_dose(
    session: AsyncSession, token: str | None, *, now: datetime | None = None
) -> DoseLookup:
    """Transition the dose for ``token`` to confirmed exactly once.

    The status change is one conditional ``UPDATE``; of two concurrent
    redemptions only one sees an affected row.
    """
    return await _confirm_where(session, MedicationDose.one_time_token, token, now)


async def confirm_dose_by_short_code(
    session: AsyncSession, short_code: str | None, *, now: datetime | None = None
) -> DoseLookup:
    return await _confirm_where(session, MedicationDose.short_code, short_code, now)


async def expire_stale_doses(
    session: AsyncSession, *, now: datetime | None = None
) -> int:
    """Mark pending doses whose token has lapsed as expired."""

    cutoff = _now(now)
    result = await session.execute(
        update(MedicationDose)
        .where(
            MedicationDose.status == DoseStatus.PENDING,
            MedicationDose.token_expires_at <= cutoff,
        )
        .values(status=DoseStatus.EXPIRED, updated_at=cutoff)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    expired = result.rowcount or 0
    if expired:
        logger.info("Expired %s stale pending doses", expired)
    return expired
