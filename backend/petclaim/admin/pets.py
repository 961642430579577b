"""Pet data diagnostics and repairs."""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from petclaim.admin.registry import NoInput, admin_operation
from petclaim.models import NULLABLE_TEXT_FIELDS, Pet


class RepairInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    apply: bool = False


def _blank(field: str):
    return func.trim(getattr(Pet, field)) == ""


@admin_operation("check-insurance-values")
async def check_insurance_values(
    session: AsyncSession, params: NoInput
) -> dict[str, Any]:
    """Group pets by their stored insurance company value."""
    result = await session.execute(
        select(Pet.insurance_company, Pet.name)
        .where(Pet.insurance_company.is_not(None))
        .order_by(Pet.insurance_company, Pet.name)
    )
    groups: dict[str, list[str]] = defaultdict(list)
    for company, name in result.all():
        groups[company].append(name)
    return {
        "values": [
            {"insurance_company": company, "pets": names}
            for company, names in sorted(groups.items())
        ],
        "total": len(groups),
    }


@admin_operation("find-empty-strings")
async def find_empty_strings(session: AsyncSession, params: NoInput) -> dict[str, Any]:
    """List pets whose optional text fields hold empty strings instead of NULL."""
    result = await session.execute(
        select(Pet)
        .where(or_(*(_blank(field) for field in NULLABLE_TEXT_FIELDS)))
        .order_by(Pet.name)
    )
    pets = []
    for pet in result.scalars().all():
        fields = [
            field
            for field in NULLABLE_TEXT_FIELDS
            if isinstance(getattr(pet, field), str) and not getattr(pet, field).strip()
        ]
        pets.append({"id": str(pet.id), "name": pet.name, "fields": fields})
    return {"pets": pets, "total": len(pets)}


@admin_operation("repair-empty-strings", input_model=RepairInput)
async def repair_empty_strings(
    session: AsyncSession, params: RepairInput
) -> dict[str, Any]:
    """Normalize empty-string pet fields to NULL (dry run unless apply=true)."""
    counts: dict[str, int] = {}
    for field in NULLABLE_TEXT_FIELDS:
        if params.apply:
            result = await session.execute(
                update(Pet)
                .where(_blank(field))
                .values({field: None})
                .execution_options(synchronize_session=False)
            )
            counts[field] = result.rowcount or 0
        else:
            counts[field] = int(
                (
                    await session.execute(
                        select(func.count(Pet.id)).where(_blank(field))
                    )
                ).scalar_one()
            )
    if params.apply:
        await session.commit()
    return {
        "applied": params.apply,
        "fields": {field: count for field, count in counts.items() if count},
        "total": sum(counts.values()),
    }
