"""Client ORM model: one row per person a practitioner assesses."""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, Float, Index, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin


class Client(TimestampMixin, Base):
    """A practitioner's client.

    ``user_id`` is the owning practitioner; every read and write is scoped
    by it.  Archival is a soft delete that records the earliest date the
    row may be permanently removed under record-retention rules.
    """

    __tablename__ = "clients"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Geocoded address, used by route planning on the mobile side
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # --- Archival ---
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    deletion_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    can_delete_after: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )

    __table_args__ = (
        Index(
            "ix_clients_live_user",
            "user_id",
            "created_at",
            postgresql_where=text("is_archived = false"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id!s}, user={self.user_id!r}, name={self.name!r})>"
