"""Insurance claim submissions."""

from __future__ import annotations

import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petclaim.db.base import Base
from petclaim.models.mixins import TimestampMixin, enum_values

if TYPE_CHECKING:
    from petclaim.models import Pet, Profile


class FilingStatus(str, enum.Enum):
    """Lifecycle of a claim with the insurer."""

    NOT_FILED = "not_filed"
    FILED = "filed"
    APPROVED = "approved"
    DENIED = "denied"
    PAID = "paid"


class Claim(TimestampMixin, Base):
    """A single claim for one vet visit."""

    __tablename__ = "claims"
    __table_args__ = (
        Index("ix_claims_user", "user_id"),
        Index("ix_claims_pet", "pet_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False
    )
    clinic_name: Mapped[str | None] = mapped_column(String(240))
    clinic_phone: Mapped[str | None] = mapped_column(String(32))
    clinic_address: Mapped[str | None] = mapped_column(String(480))
    service_date: Mapped[date | None] = mapped_column(Date())
    visit_title: Mapped[str | None] = mapped_column(String(240))
    diagnosis: Mapped[str | None] = mapped_column(String(1024))
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    filing_status: Mapped[FilingStatus] = mapped_column(
        Enum(FilingStatus, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=FilingStatus.NOT_FILED,
    )
    filing_deadline_days: Mapped[int] = mapped_column(
        Integer, nullable=False, default=90
    )
    filed_date: Mapped[date | None] = mapped_column(Date())
    pdf_path: Mapped[str | None] = mapped_column(String(512))

    owner: Mapped["Profile"] = relationship("Profile", back_populates="claims")
    pet: Mapped["Pet"] = relationship("Pet", back_populates="claims")
    items: Mapped[list["ClaimItem"]] = relationship(
        "ClaimItem", back_populates="claim", cascade="all, delete-orphan"
    )


class ClaimItem(Base):
    """Itemized charge on a claim."""

    __tablename__ = "claim_items"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    claim_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("claims.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(String(480), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    claim: Mapped["Claim"] = relationship("Claim", back_populates="items")
