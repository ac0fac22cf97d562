"""House map ORM models built from walkthrough video analysis.

An assessment has at most one house map; regenerating replaces it.
"""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin


class HouseMap(TimestampMixin, Base):
    __tablename__ = "house_maps"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    property_type: Mapped[str] = mapped_column(String(30), nullable=False)
    total_area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    floors: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    ai_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )


class Room(TimestampMixin, Base):
    __tablename__ = "rooms"

    house_map_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("house_maps.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    room_type: Mapped[str] = mapped_column(String(30), nullable=False)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Metres
    length: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    # {"x": ..., "y": ..., "z": ...}
    position_3d: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    features: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)


class Area(TimestampMixin, Base):
    """An outdoor or non-room space (yard, driveway, balcony)."""

    __tablename__ = "areas"

    house_map_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("house_maps.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    area_type: Mapped[str] = mapped_column(String(30), nullable=False)
    length: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    position_3d: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    features: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
