"""BillingService: numbered quotes and invoices attached to assessments.

Numbers come from an atomic per-kind counter, so two concurrent creates
never share a number; the unique constraint on the number column backs
this up.  Totals are always recomputed on the server from line items.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.billing import Invoice, Quote
from otassess_db.models.enums import DocumentKind, InvoiceStatus, QuoteStatus
from otassess_db.repositories import AssessmentRepository, BillingRepository

from otassess_core.calculator import LineItem, Totals, calculate_totals, format_document_number
from otassess_core.constants import INVOICE_NUMBER_PREFIX, QUOTE_NUMBER_PREFIX
from otassess_core.context import RequestContext
from otassess_core.errors import NotFoundError
from otassess_core.models.billing import (
    InvoiceCreate,
    InvoiceItem,
    InvoiceUpdate,
    QuoteCreate,
    QuoteItem,
    QuoteUpdate,
)
from otassess_core.ownership import require_assessment

logger = logging.getLogger(__name__)


def quote_totals(items: list[QuoteItem]) -> Totals:
    return calculate_totals(LineItem.of(i.price, i.quantity) for i in items)


def invoice_totals(
    items: list[InvoiceItem],
    hourly_rate: float | None = None,
    hours_worked: float | None = None,
) -> Totals:
    """Line items plus billed hours; hours only count when both values are given."""
    lines = [LineItem.of(i.rate, i.quantity) for i in items]
    if hourly_rate is not None and hours_worked is not None:
        lines.append(LineItem.of(hourly_rate, hours_worked))
    return calculate_totals(lines)


def _totals_fields(totals: Totals) -> dict[str, Any]:
    return {"subtotal": totals.subtotal, "tax": totals.tax, "total": totals.total}


class BillingService:
    def __init__(self) -> None:
        self._repo = BillingRepository()
        self._assessments = AssessmentRepository()

    async def _next_number(self, db: AsyncSession, kind: DocumentKind, prefix: str) -> str:
        value = await self._repo.next_number(db, kind.value)
        return format_document_number(prefix, value)

    # ==================================================================
    # Quotes
    # ==================================================================

    async def create_quote(
        self, db: AsyncSession, ctx: RequestContext, data: QuoteCreate,
    ) -> Quote:
        assessment = await require_assessment(self._assessments, db, ctx, data.assessment_id)
        number = await self._next_number(db, DocumentKind.QUOTE, QUOTE_NUMBER_PREFIX)
        quote = await self._repo.create_quote(
            db,
            assessment_id=assessment.id,
            quote_number=number,
            option_name=data.option_name,
            items=[i.model_dump(mode="json") for i in data.items],
            notes=data.notes,
            valid_until=data.valid_until,
            status=QuoteStatus.DRAFT.value,
            **_totals_fields(quote_totals(data.items)),
        )
        logger.info("Created quote %s for assessment %s (%s)", number, assessment.id, ctx)
        return quote

    async def list_quotes(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        assessment_id: uuid.UUID | None = None,
        status: QuoteStatus | None = None,
    ) -> list[Quote]:
        if assessment_id is not None:
            await require_assessment(self._assessments, db, ctx, assessment_id)
        return await self._repo.list_quotes(
            db, ctx.user_id, assessment_id=assessment_id, status=status.value if status else None,
        )

    async def get_quote(self, db: AsyncSession, ctx: RequestContext, quote_id: uuid.UUID) -> Quote:
        quote = await self._repo.get_quote(db, ctx.user_id, quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)
        return quote

    async def update_quote(
        self, db: AsyncSession, ctx: RequestContext, quote_id: uuid.UUID, data: QuoteUpdate,
    ) -> Quote:
        quote = await self.get_quote(db, ctx, quote_id)
        fields = data.model_dump(exclude_unset=True, exclude={"items", "status"})
        if data.items is not None:
            fields["items"] = [i.model_dump(mode="json") for i in data.items]
            fields.update(_totals_fields(quote_totals(data.items)))
        if data.status is not None:
            fields["status"] = data.status.value
        if not fields:
            return quote
        return await self._repo.update_quote(db, quote, fields)

    async def delete_quote(self, db: AsyncSession, ctx: RequestContext, quote_id: uuid.UUID) -> None:
        quote = await self.get_quote(db, ctx, quote_id)
        await self._repo.delete_quote(db, quote)

    # ==================================================================
    # Invoices
    # ==================================================================

    async def create_invoice(
        self, db: AsyncSession, ctx: RequestContext, data: InvoiceCreate,
    ) -> Invoice:
        assessment = await require_assessment(self._assessments, db, ctx, data.assessment_id)
        number = await self._next_number(db, DocumentKind.INVOICE, INVOICE_NUMBER_PREFIX)
        totals = invoice_totals(data.items, data.hourly_rate, data.hours_worked)
        invoice = await self._repo.create_invoice(
            db,
            assessment_id=assessment.id,
            invoice_number=number,
            items=[i.model_dump(mode="json") for i in data.items],
            hourly_rate=data.hourly_rate,
            hours_worked=data.hours_worked,
            due_date=data.due_date,
            notes=data.notes,
            status=InvoiceStatus.DRAFT.value,
            **_totals_fields(totals),
        )
        logger.info("Created invoice %s for assessment %s (%s)", number, assessment.id, ctx)
        return invoice

    async def list_invoices(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        assessment_id: uuid.UUID | None = None,
        status: InvoiceStatus | None = None,
    ) -> list[Invoice]:
        if assessment_id is not None:
            await require_assessment(self._assessments, db, ctx, assessment_id)
        return await self._repo.list_invoices(
            db, ctx.user_id, assessment_id=assessment_id, status=status.value if status else None,
        )

    async def get_invoice(
        self, db: AsyncSession, ctx: RequestContext, invoice_id: uuid.UUID,
    ) -> Invoice:
        invoice = await self._repo.get_invoice(db, ctx.user_id, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def update_invoice(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        invoice_id: uuid.UUID,
        data: InvoiceUpdate,
        *,
        now: datetime | None = None,
    ) -> Invoice:
        """Partial update.

        Totals are recomputed when items or billed hours change.  Moving to
        ``paid`` stamps ``paid_date``; moving away from it clears the stamp.
        """
        invoice = await self.get_invoice(db, ctx, invoice_id)
        provided = data.model_fields_set
        fields = data.model_dump(exclude_unset=True, exclude={"items", "status"})

        if provided & {"items", "hourly_rate", "hours_worked"}:
            items = (
                data.items if data.items is not None
                else [InvoiceItem.model_validate(i) for i in invoice.items]
            )
            hourly_rate = data.hourly_rate if "hourly_rate" in provided else invoice.hourly_rate
            hours_worked = data.hours_worked if "hours_worked" in provided else invoice.hours_worked
            if data.items is not None:
                fields["items"] = [i.model_dump(mode="json") for i in data.items]
            fields.update(_totals_fields(invoice_totals(items, hourly_rate, hours_worked)))

        if data.status is not None and data.status != invoice.status:
            fields["status"] = data.status.value
            if data.status == InvoiceStatus.PAID:
                fields["paid_date"] = now or datetime.now(timezone.utc)
            elif invoice.status == InvoiceStatus.PAID:
                fields["paid_date"] = None
            logger.info(
                "Invoice %s status %s -> %s (%s)",
                invoice.invoice_number, InvoiceStatus(invoice.status).value, data.status.value, ctx,
            )

        if not fields:
            return invoice
        return await self._repo.update_invoice(db, invoice, fields)

    async def delete_invoice(
        self, db: AsyncSession, ctx: RequestContext, invoice_id: uuid.UUID,
    ) -> None:
        invoice = await self.get_invoice(db, ctx, invoice_id)
        await self._repo.delete_invoice(db, invoice)
