"""Account lookup and cleanup operations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from petclaim.admin.registry import AdminOperationError, NoInput, admin_operation
from petclaim.models import (
    Claim,
    ClaimItem,
    Medication,
    MedicationDose,
    MedicationReminderLog,
    Pet,
    Profile,
)
from petclaim.security.redact import mask_phone


class EmailInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3)


class DeleteAccountsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    emails: list[str] = Field(min_length=1)
    apply: bool = False

    @field_validator("emails", mode="before")
    @classmethod
    def _split(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


def profile_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": str(profile.id),
        "email": profile.email,
        "full_name": profile.full_name,
        "phone": mask_phone(profile.phone),
        "sms_opt_in": profile.sms_opt_in,
        "is_admin": profile.is_admin,
    }


def pet_row(pet: Pet) -> dict[str, Any]:
    return {
        "id": str(pet.id),
        "name": pet.name,
        "species": pet.species,
        "insurance_company": pet.insurance_company,
        "policy_number": pet.policy_number,
        "date_of_birth": pet.date_of_birth.isoformat() if pet.date_of_birth else None,
    }


async def find_profile_by_email(session: AsyncSession, email: str) -> Profile | None:
    result = await session.execute(
        select(Profile)
        .options(selectinload(Profile.pets))
        .where(func.lower(Profile.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


@admin_operation("find-profile", input_model=EmailInput)
async def find_profile(session: AsyncSession, params: EmailInput) -> dict[str, Any]:
    """Show a profile and its pets by email."""
    profile = await find_profile_by_email(session, params.email)
    if profile is None:
        raise AdminOperationError(f"No profile found for {params.email}")
    return {
        "profile": profile_row(profile),
        "pets": [pet_row(pet) for pet in sorted(profile.pets, key=lambda p: p.name)],
    }


@admin_operation("list-users")
async def list_users(session: AsyncSession, params: NoInput) -> dict[str, Any]:
    """List every profile with its pet count."""
    result = await session.execute(
        select(Profile, func.count(Pet.id))
        .outerjoin(Pet, Pet.user_id == Profile.id)
        .group_by(Profile.id)
        .order_by(Profile.created_at)
    )
    users = [
        {**profile_row(profile), "pet_count": pet_count}
        for profile, pet_count in result.all()
    ]
    return {"users": users, "total": len(users)}


async def _count(session: AsyncSession, stmt) -> int:
    return int((await session.execute(stmt)).scalar_one())


async def _account_footprint(session: AsyncSession, user_id) -> dict[str, int]:
    claim_ids = select(Claim.id).where(Claim.user_id == user_id)
    return {
        "medication_doses": await _count(
            session,
            select(func.count(MedicationDose.id)).where(MedicationDose.user_id == user_id),
        ),
        "medication_reminders_log": await _count(
            session,
            select(func.count(MedicationReminderLog.id)).where(
                MedicationReminderLog.user_id == user_id
            ),
        ),
        "medications": await _count(
            session, select(func.count(Medication.id)).where(Medication.user_id == user_id)
        ),
        "claim_items": await _count(
            session,
            select(func.count(ClaimItem.id)).where(ClaimItem.claim_id.in_(claim_ids)),
        ),
        "claims": await _count(
            session, select(func.count(Claim.id)).where(Claim.user_id == user_id)
        ),
        "pets": await _count(
            session, select(func.count(Pet.id)).where(Pet.user_id == user_id)
        ),
        "profiles": 1,
    }


async def _delete_account(session: AsyncSession, user_id) -> None:
    claim_ids = select(Claim.id).where(Claim.user_id == user_id)
    # Children first; foreign keys are not relied on to cascade.
    await session.execute(delete(MedicationDose).where(MedicationDose.user_id == user_id))
    await session.execute(
        delete(MedicationReminderLog).where(MedicationReminderLog.user_id == user_id)
    )
    await session.execute(delete(Medication).where(Medication.user_id == user_id))
    await session.execute(delete(ClaimItem).where(ClaimItem.claim_id.in_(claim_ids)))
    await session.execute(delete(Claim).where(Claim.user_id == user_id))
    await session.execute(delete(Pet).where(Pet.user_id == user_id))
    await session.execute(delete(Profile).where(Profile.id == user_id))


@admin_operation("delete-test-accounts", input_model=DeleteAccountsInput)
async def delete_test_accounts(
    session: AsyncSession, params: DeleteAccountsInput
) -> dict[str, Any]:
    """Delete test accounts and everything they own (dry run unless apply=true)."""
    accounts: list[dict[str, Any]] = []
    totals: dict[str, int] = {}
    for email in params.emails:
        profile = await find_profile_by_email(session, email)
        if profile is None:
            accounts.append({"email": email, "found": False})
            continue
        footprint = await _account_footprint(session, profile.id)
        for table, count in footprint.items():
            totals[table] = totals.get(table, 0) + count
        if params.apply:
            await _delete_account(session, profile.id)
        accounts.append({"email": email, "found": True, "rows": footprint})
    if params.apply:
        await session.commit()
    return {"applied": params.apply, "accounts": accounts, "totals": totals}


class CopyPetsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source_email: str = Field(min_length=3)
    dest_email: str = Field(min_length=3)
    apply: bool = False


# Columns owned by the row itself rather than by the pet's data.
_PET_IDENTITY_COLUMNS = frozenset({"id", "user_id", "created_at", "updated_at"})


def _pet_copy_values(pet: Pet) -> dict[str, Any]:
    return {
        column.key: getattr(pet, column.key)
        for column in Pet.__table__.columns
        if column.key not in _PET_IDENTITY_COLUMNS
    }


@admin_operation("copy-pets", input_model=CopyPetsInput)
async def copy_pets(session: AsyncSession, params: CopyPetsInput) -> dict[str, Any]:
    """Copy one account's pets onto another (dry run unless apply=true)."""
    source = await find_profile_by_email(session, params.source_email)
    if source is None:
        raise AdminOperationError(f"No profile found for {params.source_email}")
    dest = await find_profile_by_email(session, params.dest_email)
    if dest is None:
        raise AdminOperationError(f"No profile found for {params.dest_email}")
    if source.id == dest.id:
        raise AdminOperationError("Source and destination are the same profile")

    existing = {pet.name.lower() for pet in dest.pets}
    copied: list[str] = []
    skipped: list[str] = []
    for pet in sorted(source.pets, key=lambda p: p.created_at):
        if pet.name.lower() in existing:
            skipped.append(pet.name)
            continue
        copied.append(pet.name)
        if params.apply:
            session.add(Pet(user_id=dest.id, **_pet_copy_values(pet)))
    if params.apply:
        await session.commit()
    return {
        "applied": params.apply,
        "source": params.source_email,
        "destination": params.dest_email,
        "copied": copied,
        "skipped": skipped,
    }
