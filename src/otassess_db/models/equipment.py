"""Equipment catalog and per-assessment equipment recommendations."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin
from otassess_db.models.enums import RecommendationPriority


class EquipmentItem(TimestampMixin, Base):
    """A catalog item.  The catalog is shared across practitioners."""

    __tablename__ = "equipment_items"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    supplier_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    margin: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    brand: Mapped[str | None] = mapped_column(Text, nullable=True)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    specifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    government_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    approval_reference: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Filename of the supplier catalog an item was extracted from, if any
    source_catalog: Mapped[str | None] = mapped_column(Text, nullable=True)


class EquipmentRecommendation(TimestampMixin, Base):
    """An equipment item recommended for a specific assessment."""

    __tablename__ = "equipment_recommendations"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    equipment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("equipment_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default=RecommendationPriority.MEDIUM,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    justification: Mapped[str | None] = mapped_column(Text, nullable=True)
