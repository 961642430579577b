"""Pet profile model."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petclaim.db.base import Base
from petclaim.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from petclaim.models import Claim, Medication, Profile


# Optional free-text columns where an empty string is treated as missing.
NULLABLE_TEXT_FIELDS = (
    "breed",
    "spay_neuter_status",
    "insurance_company",
    "policy_number",
    "healthy_paws_pet_id",
    "pumpkin_account_number",
    "spot_account_number",
    "figo_policy_number",
)


class Pet(TimestampMixin, Base):
    """A pet owned by a profile, with its insurer identifiers."""

    __tablename__ = "pets"
    __table_args__ = (Index("ix_pets_user", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    species: Mapped[str] = mapped_column(String(32), nullable=False, default="dog")
    breed: Mapped[str | None] = mapped_column(String(120))
    date_of_birth: Mapped[date | None] = mapped_column(Date())
    adoption_date: Mapped[date | None] = mapped_column(Date())
    spay_neuter_status: Mapped[str | None] = mapped_column(String(32))
    insurance_company: Mapped[str | None] = mapped_column(String(120))
    policy_number: Mapped[str | None] = mapped_column(String(120))
    healthy_paws_pet_id: Mapped[str | None] = mapped_column(String(64))
    pumpkin_account_number: Mapped[str | None] = mapped_column(String(64))
    spot_account_number: Mapped[str | None] = mapped_column(String(64))
    figo_policy_number: Mapped[str | None] = mapped_column(String(64))

    owner: Mapped["Profile"] = relationship("Profile", back_populates="pets")
    claims: Mapped[list["Claim"]] = relationship(
        "Claim", back_populates="pet", cascade="all, delete-orphan"
    )
    medications: Mapped[list["Medication"]] = relationship(
        "Medication", back_populates="pet", cascade="all, delete-orphan"
    )
