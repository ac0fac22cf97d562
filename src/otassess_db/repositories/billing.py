"""Async repository for quotes, invoices and their numbering counter.

Quotes and invoices carry no ``user_id`` of their own; ownership flows
through the parent assessment, so every scoped query joins ``assessments``.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.billing import DocumentCounter, Invoice, Quote


class BillingRepository:
    """Async read/write operations on ``quotes``, ``invoices`` and ``document_counters``."""

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    async def next_number(self, db: AsyncSession, kind: str) -> int:
        """Atomically reserve the next sequence value for ``kind``.

        The first call for a kind inserts ``last_value=1``; later calls
        increment under the row lock taken by ``ON CONFLICT DO UPDATE``.
        """
        stmt = (
            pg_insert(DocumentCounter)
            .values(kind=kind, last_value=1)
            .on_conflict_do_update(
                index_elements=[DocumentCounter.kind],
                set_={"last_value": DocumentCounter.last_value + 1},
            )
            .returning(DocumentCounter.last_value)
        )
        result = await db.execute(stmt)
        return int(result.scalar_one())

    # ==================================================================
    # Quotes
    # ==================================================================

    async def create_quote(
        self, db: AsyncSession, *, assessment_id: uuid.UUID, **fields: Any,
    ) -> Quote:
        quote = Quote(assessment_id=assessment_id, **fields)
        db.add(quote)
        await db.flush()
        return quote

    async def get_quote(
        self, db: AsyncSession, user_id: str, quote_id: uuid.UUID,
    ) -> Quote | None:
        stmt = (
            select(Quote)
            .join(Assessment, Assessment.id == Quote.assessment_id)
            .where(Quote.id == quote_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_quotes(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        assessment_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Quote]:
        stmt = (
            select(Quote)
            .join(Assessment, Assessment.id == Quote.assessment_id)
            .where(Assessment.user_id == user_id)
        )
        if assessment_id is not None:
            stmt = stmt.where(Quote.assessment_id == assessment_id)
        if status is not None:
            stmt = stmt.where(Quote.status == status)
        result = await db.execute(stmt.order_by(Quote.created_at.desc()))
        return list(result.scalars().all())

    async def update_quote(
        self, db: AsyncSession, quote: Quote, fields: dict[str, Any],
    ) -> Quote:
        for key, value in fields.items():
            setattr(quote, key, value)
        quote.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return quote

    async def delete_quote(self, db: AsyncSession, quote: Quote) -> None:
        await db.delete(quote)
        await db.flush()

    # ==================================================================
    # Invoices
    # ==================================================================

    async def create_invoice(
        self, db: AsyncSession, *, assessment_id: uuid.UUID, **fields: Any,
    ) -> Invoice:
        invoice = Invoice(assessment_id=assessment_id, **fields)
        db.add(invoice)
        await db.flush()
        return invoice

    async def get_invoice(
        self, db: AsyncSession, user_id: str, invoice_id: uuid.UUID,
    ) -> Invoice | None:
        stmt = (
            select(Invoice)
            .join(Assessment, Assessment.id == Invoice.assessment_id)
            .where(Invoice.id == invoice_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_invoices(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        assessment_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Invoice]:
        stmt = (
            select(Invoice)
            .join(Assessment, Assessment.id == Invoice.assessment_id)
            .where(Assessment.user_id == user_id)
        )
        if assessment_id is not None:
            stmt = stmt.where(Invoice.assessment_id == assessment_id)
        if status is not None:
            stmt = stmt.where(Invoice.status == status)
        result = await db.execute(stmt.order_by(Invoice.created_at.desc()))
        return list(result.scalars().all())

    async def update_invoice(
        self, db: AsyncSession, invoice: Invoice, fields: dict[str, Any],
    ) -> Invoice:
        for key, value in fields.items():
            setattr(invoice, key, value)
        invoice.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return invoice

    async def delete_invoice(self, db: AsyncSession, invoice: Invoice) -> None:
        await db.delete(invoice)
        await db.flush()
