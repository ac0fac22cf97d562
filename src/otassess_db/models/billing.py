"""Quote, invoice and document-number counter ORM models.

Document numbers come from ``document_counters``: one row per document
kind, incremented atomically with ``INSERT ... ON CONFLICT DO UPDATE ...
RETURNING``.  The unique constraints on the number columns are the last
line against duplicates.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin
from otassess_db.models.enums import InvoiceStatus, QuoteStatus


class Quote(TimestampMixin, Base):
    """A priced equipment option for an assessment."""

    __tablename__ = "quotes"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quote_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    option_name: Mapped[str] = mapped_column(Text, nullable=False)
    # [{"equipment_id": ..., "name": ..., "quantity": ..., "price": ...}]
    items: Mapped[list] = mapped_column(JSONB, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    valid_until: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    status: Mapped[QuoteStatus] = mapped_column(
        String(20), nullable=False, default=QuoteStatus.DRAFT,
    )


class Invoice(TimestampMixin, Base):
    """A bill for services and items delivered under an assessment."""

    __tablename__ = "invoices"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invoice_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    # [{"description": ..., "quantity": ..., "rate": ...}]
    items: Mapped[list] = mapped_column(JSONB, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    status: Mapped[InvoiceStatus] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.DRAFT, index=True,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    paid_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class DocumentCounter(Base):
    """Monotonic sequence per document kind (``quote``, ``invoice``)."""

    __tablename__ = "document_counters"

    kind: Mapped[str] = mapped_column(String(20), primary_key=True)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
