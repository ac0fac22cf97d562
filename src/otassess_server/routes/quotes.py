"""Quote endpoints: priced equipment options for an assessment.

Totals are always computed on the server from the line items
(10% tax, rounded to cents); numbers come from an atomic counter.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import QuoteStatus

from otassess_core.billing import BillingService
from otassess_core.context import RequestContext
from otassess_core.models import QuoteCreate, QuoteUpdate, QuoteView

from otassess_server.dependencies import get_billing_service, get_db, get_request_context

router = APIRouter(prefix="/quotes", tags=["quotes"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
async def list_quotes(
    assessment_id: uuid.UUID | None = Query(None),
    status: QuoteStatus | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> list[QuoteView]:
    quotes = await billing.list_quotes(db, ctx, assessment_id=assessment_id, status=status)
    return [QuoteView.model_validate(q) for q in quotes]


@router.post("", status_code=201)
async def create_quote(
    body: QuoteCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> QuoteView:
    """Create a draft quote numbered ``Q000001`` onwards."""
    return QuoteView.model_validate(await billing.create_quote(db, ctx, body))


@router.get("/{quote_id}")
async def get_quote(
    quote_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> QuoteView:
    return QuoteView.model_validate(await billing.get_quote(db, ctx, quote_id))


@router.put("/{quote_id}")
async def update_quote(
    quote_id: uuid.UUID,
    body: QuoteUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> QuoteView:
    """Partial update; new ``items`` recompute the totals."""
    return QuoteView.model_validate(await billing.update_quote(db, ctx, quote_id, body))


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(
    quote_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    billing: BillingService = Depends(get_billing_service),
) -> None:
    await billing.delete_quote(db, ctx, quote_id)
