"""Test claim seeding and cleanup."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from petclaim.admin.accounts import find_profile_by_email
from petclaim.admin.registry import AdminOperationError, admin_operation
from petclaim.models import Claim, ClaimItem, FilingStatus, Profile
from petclaim.services import medication_service

TEST_CLAIM_PREFIX = "Test Claim"
# Days before the filing deadline that the deadline reminders warn at.
DEADLINE_WARNINGS = (7, 30, 60)
FILING_DEADLINE_DAYS = 90


class SeedClaimsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3)
    pet_name: str = Field(min_length=1)
    amount: Decimal = Field(default=Decimal("125.00"), gt=0)


class DeleteClaimsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3)
    apply: bool = False


async def _require_profile(session: AsyncSession, email: str) -> Profile:
    profile = await find_profile_by_email(session, email)
    if profile is None:
        raise AdminOperationError(f"No profile found for {email}")
    return profile


def _claim_row(claim: Claim) -> dict[str, Any]:
    return {
        "id": str(claim.id),
        "visit_title": claim.visit_title,
        "service_date": claim.service_date.isoformat() if claim.service_date else None,
        "total_amount": str(claim.total_amount),
        "filing_status": claim.filing_status.value,
    }


@admin_operation("create-test-claims", input_model=SeedClaimsInput)
async def create_test_claims(
    session: AsyncSession, params: SeedClaimsInput
) -> dict[str, Any]:
    """Create unfiled claims that hit the 7, 30 and 60 day deadline warnings."""
    profile = await _require_profile(session, params.email)
    pet = next(
        (p for p in profile.pets if p.name.lower() == params.pet_name.strip().lower()),
        None,
    )
    if pet is None:
        raise AdminOperationError(f"No pet named {params.pet_name} for {params.email}")

    today = medication_service.local_today()
    claims: list[Claim] = []
    for days_left in DEADLINE_WARNINGS:
        service_date = today - timedelta(days=FILING_DEADLINE_DAYS - days_left)
        claim = Claim(
            user_id=profile.id,
            pet_id=pet.id,
            clinic_name="Test Veterinary Clinic",
            service_date=service_date,
            visit_title=f"{TEST_CLAIM_PREFIX} - {days_left} Day Warning",
            total_amount=params.amount,
            filing_status=FilingStatus.NOT_FILED,
            filing_deadline_days=FILING_DEADLINE_DAYS,
        )
        claim.items.append(ClaimItem(description="Exam", amount=params.amount))
        session.add(claim)
        claims.append(claim)
    await session.commit()
    return {"pet": pet.name, "claims": [_claim_row(claim) for claim in claims]}


@admin_operation("delete-test-claims", input_model=DeleteClaimsInput)
async def delete_test_claims(
    session: AsyncSession, params: DeleteClaimsInput
) -> dict[str, Any]:
    """Delete an account's seeded test claims (dry run unless apply=true)."""
    profile = await _require_profile(session, params.email)
    result = await session.execute(
        select(Claim)
        .options(selectinload(Claim.items))
        .where(
            Claim.user_id == profile.id,
            Claim.visit_title.startswith(TEST_CLAIM_PREFIX),
        )
        .order_by(Claim.service_date)
    )
    claims = list(result.scalars().all())
    rows = [_claim_row(claim) for claim in claims]
    item_count = sum(len(claim.items) for claim in claims)
    if params.apply and claims:
        claim_ids = [claim.id for claim in claims]
        await session.execute(delete(ClaimItem).where(ClaimItem.claim_id.in_(claim_ids)))
        await session.execute(delete(Claim).where(Claim.id.in_(claim_ids)))
        await session.commit()
    return {
        "applied": params.apply,
        "claims": rows,
        "claim_items": item_count,
        "total": len(rows),
    }
