"""Invoice endpoints.

Billed amount is the line items plus ``hourly_rate * hours_worked`` when
both are given.  Moving to ``paid`` stamps ``paid_date``.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import InvoiceStatus

from otassess_core.billing import BillingService
from otassess_core.context import RequestContext
from otassess_core.models import InvoiceCreate, InvoiceUpdate, InvoiceView

from otassess_server.dependencies import get_billing_service, get_db, get_request_context

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("")
async def list_invoices(
    assessment_id: uuid.UUID | None = Query(None),
    status: InvoiceStatus | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> list[InvoiceView]:
    invoices = await billing.list_invoices(db, ctx, assessment_id=assessment_id, status=status)
    return [InvoiceView.model_validate(i) for i in invoices]


@router.post("", status_code=201)
async def create_invoice(
    body: InvoiceCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> InvoiceView:
    """Create a draft invoice numbered ``INV000001`` onwards."""
    return InvoiceView.model_validate(await billing.create_invoice(db, ctx, body))


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> InvoiceView:
    return InvoiceView.model_validate(await billing.get_invoice(db, ctx, invoice_id))


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: uuid.UUID,
    body: InvoiceUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> InvoiceView:
    return InvoiceView.model_validate(await billing.update_invoice(db, ctx, invoice_id, body))


@router.delete("/{invoice_id}", status_code=204)
async def delete_invoice(
    invoice_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> None:
    await billing.delete_invoice(db, ctx, invoice_id)
