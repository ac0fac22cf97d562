"""IoT device library and device placements on house maps."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin
from otassess_db.models.enums import PlacementPriority, PlacementStatus


class IoTDevice(TimestampMixin, Base):
    """A smart-home or assistive-tech device.  Shared across practitioners like the equipment catalog."""

    __tablename__ = "iot_devices"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    manufacturer: Mapped[str | None] = mapped_column(Text, nullable=True)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    # safety, security, accessibility, health, lighting, climate, ...
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    device_type: Mapped[str] = mapped_column(String(40), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    technical_specs: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    # idealHeight, minDistance, avoidAreas, requirements, ...
    placement_rules: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    # Square metres
    coverage_area: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    power_requirements: Mapped[str | None] = mapped_column(String(30), nullable=True)
    connectivity: Mapped[str | None] = mapped_column(String(30), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    installation_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    subscription_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    subscription_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    documentation_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Funding schemes the device is approved under (ndis, dva, ...)
    approved_for: Mapped[list | None] = mapped_column(JSONB, nullable=True)


class DevicePlacement(TimestampMixin, Base):
    """A library device positioned on a house map, optionally inside a room or area."""

    __tablename__ = "device_placements"

    house_map_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("house_maps.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    device_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("iot_devices.id", ondelete="CASCADE"),
        nullable=False,
    )
    room_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    area_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("areas.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # {"x": ..., "y": ..., "z": ...}
    position_3d: Mapped[dict] = mapped_column(JSONB, nullable=False)
    placement_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[PlacementPriority] = mapped_column(
        String(20), nullable=False, default=PlacementPriority.RECOMMENDED,
    )
    status: Mapped[PlacementStatus] = mapped_column(
        String(20), nullable=False, default=PlacementStatus.PROPOSED,
    )
    installation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_recommended: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
