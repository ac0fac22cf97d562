"""Appointment ORM model: a practitioner's calendar entry, optionally for a client."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin
from otassess_db.models.enums import AppointmentStatus, AppointmentType


class Appointment(TimestampMixin, Base):
    """A scheduled visit, call or consultation.

    ``reminder_date`` is kept at a fixed lead time before ``start_time``;
    moving the start time re-arms the reminder.  Consent is recorded once
    the client agrees to the visit and confirms the appointment.
    """

    __tablename__ = "appointments"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Deleting a client keeps the practitioner's calendar history
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    appointment_type: Mapped[AppointmentType] = mapped_column(String(20), nullable=False)
    start_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_all_day: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        String(20), nullable=False, default=AppointmentStatus.SCHEDULED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    guidelines: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Reminders ---
    reminder_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    reminder_sent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )

    # --- Consent ---
    consent_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true"),
    )
    consent_given: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    consent_given_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    consent_given_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    consent_method: Mapped[str | None] = mapped_column(String(30), nullable=True)

    __table_args__ = (
        Index("ix_appointments_user_start", "user_id", "start_time"),
        Index(
            "ix_appointments_due_reminders",
            "reminder_date",
            postgresql_where=text("reminder_sent = false"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id!s}, user={self.user_id!r}, "
            f"start={self.start_time!s}, status={self.status!r})>"
        )
