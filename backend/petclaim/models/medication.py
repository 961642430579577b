"""Medication, dose and reminder log models."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petclaim.db.base import Base
from petclaim.models.mixins import TimestampMixin, enum_values

if TYPE_CHECKING:
    from petclaim.models import Pet, Profile


class DoseStatus(str, enum.Enum):
    """Lifecycle of a single scheduled dose."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"


class Medication(TimestampMixin, Base):
    """A medication course with its daily reminder times."""

    __tablename__ = "medications"
    __table_args__ = (
        Index("ix_medications_user", "user_id"),
        Index("ix_medications_pet", "pet_id"),
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
    medication_name: Mapped[str] = mapped_column(String(240), nullable=False)
    dosage: Mapped[str | None] = mapped_column(String(120))
    frequency: Mapped[str | None] = mapped_column(String(64))
    reminder_times: Mapped[list[str] | None] = mapped_column(JSON)
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date())

    owner: Mapped["Profile"] = relationship("Profile", back_populates="medications")
    pet: Mapped["Pet"] = relationship("Pet", back_populates="medications")
    doses: Mapped[list["MedicationDose"]] = relationship(
        "MedicationDose", back_populates="medication", cascade="all, delete-orphan"
    )


class MedicationDose(TimestampMixin, Base):
    """One scheduled occurrence of a medication, confirmable by token."""

    __tablename__ = "medication_doses"
    __table_args__ = (
        Index("ix_doses_medication", "medication_id"),
        Index("ix_doses_token_expires", "token_expires_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    medication_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medications.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    given_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[DoseStatus] = mapped_column(
        Enum(DoseStatus, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=DoseStatus.PENDING,
    )
    one_time_token: Mapped[str | None] = mapped_column(String(64), unique=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    short_code: Mapped[str | None] = mapped_column(String(16), unique=True)

    medication: Mapped["Medication"] = relationship(
        "Medication", back_populates="doses"
    )


class MedicationReminderLog(Base):
    """One reminder send; the unique key doubles as the send claim."""

    __tablename__ = "medication_reminders_log"
    __table_args__ = (
        UniqueConstraint(
            "medication_id",
            "reminder_date",
            "reminder_time",
            name="uq_reminder_log_slot",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    medication_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medications.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    reminder_date: Mapped[date] = mapped_column(Date(), nullable=False)
    reminder_time: Mapped[str] = mapped_column(String(8), nullable=False)
    message_id: Mapped[str | None] = mapped_column(String(128))
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
