"""BillingService tests: numbering, server-side totals and the paid-date rule."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from otassess_db.models.enums import InvoiceStatus
from otassess_core.billing import BillingService
from otassess_core.errors import NotFoundError
from otassess_core.models.billing import (
    InvoiceCreate,
    InvoiceItem,
    InvoiceUpdate,
    QuoteCreate,
    QuoteItem,
    QuoteUpdate,
)

from helpers.fakes import FakeBillingRepository

PAID_AT = datetime(2025, 7, 14, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def billing(data, repos):
    svc = BillingService()
    svc._repo = FakeBillingRepository(data)
    svc._assessments = repos["assessments"]
    return svc


@pytest.fixture
def assessment(data):
    return data.add_assessment(data.add_client())


# =====================================================================
# Quotes
# =====================================================================


@pytest.mark.asyncio
async def test_quote_totals_computed_on_server(billing, db, ctx, assessment):
    quote = await billing.create_quote(
        db, ctx,
        QuoteCreate(
            assessment_id=assessment.id,
            option_name="Recommended",
            items=[QuoteItem(name="Grab rail", quantity=2, price=100), QuoteItem(name="Mat", price=50)],
        ),
    )
    assert quote.quote_number == "Q000001"
    assert quote.subtotal == Decimal("250.00")
    assert quote.tax == Decimal("25.00")
    assert quote.total == Decimal("275.00")
    assert quote.status == "draft"
    assert quote.items[0] == {"equipment_id": None, "name": "Grab rail", "quantity": 2, "price": 100.0}


@pytest.mark.asyncio
async def test_empty_quote_is_zero(billing, db, ctx, assessment):
    quote = await billing.create_quote(
        db, ctx, QuoteCreate(assessment_id=assessment.id, option_name="Nothing yet"),
    )
    assert quote.total == Decimal("0.00")


@pytest.mark.asyncio
async def test_numbers_are_sequential_per_kind(billing, db, ctx, assessment):
    q1 = await billing.create_quote(db, ctx, QuoteCreate(assessment_id=assessment.id, option_name="A"))
    q2 = await billing.create_quote(db, ctx, QuoteCreate(assessment_id=assessment.id, option_name="B"))
    inv = await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
    assert (q1.quote_number, q2.quote_number) == ("Q000001", "Q000002")
    assert inv.invoice_number == "INV000001"


@pytest.mark.asyncio
async def test_concurrent_invoices_get_distinct_numbers(billing, db, ctx, assessment):
    invoices = await asyncio.gather(*(
        billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
        for _ in range(12)
    ))
    numbers = [inv.invoice_number for inv in invoices]
    assert len(set(numbers)) == 12
    assert sorted(numbers) == [f"INV{n:06d}" for n in range(1, 13)]


@pytest.mark.asyncio
async def test_updating_items_recomputes_totals(billing, db, ctx, assessment):
    quote = await billing.create_quote(
        db, ctx,
        QuoteCreate(assessment_id=assessment.id, option_name="A", items=[QuoteItem(name="x", price=10)]),
    )
    await billing.update_quote(
        db, ctx, quote.id, QuoteUpdate(items=[QuoteItem(name="y", price=40, quantity=5)], status="sent"),
    )
    assert quote.subtotal == Decimal("200.00")
    assert quote.total == Decimal("220.00")
    assert quote.status == "sent"


@pytest.mark.asyncio
async def test_quote_for_foreign_assessment(billing, db, other_ctx, assessment):
    with pytest.raises(NotFoundError):
        await billing.create_quote(
            db, other_ctx, QuoteCreate(assessment_id=assessment.id, option_name="A"),
        )


@pytest.mark.asyncio
async def test_foreign_quote_is_not_found(billing, db, ctx, other_ctx, assessment):
    quote = await billing.create_quote(
        db, ctx, QuoteCreate(assessment_id=assessment.id, option_name="A"),
    )
    with pytest.raises(NotFoundError):
        await billing.get_quote(db, other_ctx, quote.id)
    assert await billing.list_quotes(db, other_ctx) == []


# =====================================================================
# Invoices
# =====================================================================


@pytest.mark.asyncio
async def test_invoice_includes_billed_hours(billing, db, ctx, assessment):
    invoice = await billing.create_invoice(
        db, ctx,
        InvoiceCreate(
            assessment_id=assessment.id,
            items=[InvoiceItem(description="Report writing", rate=120)],
            hourly_rate=150,
            hours_worked=2.5,
        ),
    )
    assert invoice.subtotal == Decimal("495.00")
    assert invoice.tax == Decimal("49.50")
    assert invoice.total == Decimal("544.50")


@pytest.mark.asyncio
async def test_hours_without_rate_are_ignored(billing, db, ctx, assessment):
    invoice = await billing.create_invoice(
        db, ctx, InvoiceCreate(assessment_id=assessment.id, hours_worked=3),
    )
    assert invoice.total == Decimal("0.00")


@pytest.mark.asyncio
async def test_changing_hours_keeps_existing_items(billing, db, ctx, assessment):
    invoice = await billing.create_invoice(
        db, ctx,
        InvoiceCreate(
            assessment_id=assessment.id,
            items=[InvoiceItem(description="Travel", rate=60)],
            hourly_rate=100,
            hours_worked=1,
        ),
    )
    await billing.update_invoice(db, ctx, invoice.id, InvoiceUpdate(hours_worked=2))
    assert invoice.subtotal == Decimal("260.00")
    assert invoice.items == [{"description": "Travel", "quantity": 1.0, "rate": 60.0}]


@pytest.mark.asyncio
async def test_paid_stamps_and_clears_paid_date(billing, db, ctx, assessment):
    invoice = await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))

    await billing.update_invoice(db, ctx, invoice.id, InvoiceUpdate(status="paid"), now=PAID_AT)
    assert invoice.status == "paid"
    assert invoice.paid_date == PAID_AT

    await billing.update_invoice(db, ctx, invoice.id, InvoiceUpdate(status="overdue"))
    assert invoice.status == "overdue"
    assert invoice.paid_date is None


@pytest.mark.asyncio
async def test_resending_paid_status_keeps_original_date(billing, db, ctx, assessment):
    invoice = await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
    await billing.update_invoice(db, ctx, invoice.id, InvoiceUpdate(status="paid"), now=PAID_AT)
    await billing.update_invoice(db, ctx, invoice.id, InvoiceUpdate(status="paid"))
    assert invoice.paid_date == PAID_AT


@pytest.mark.asyncio
async def test_list_invoices_by_status(billing, db, ctx, assessment):
    first = await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
    await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
    await billing.update_invoice(db, ctx, first.id, InvoiceUpdate(status="sent"))

    sent = await billing.list_invoices(db, ctx, status=InvoiceStatus.SENT)
    assert [i.id for i in sent] == [first.id]


@pytest.mark.asyncio
async def test_delete_invoice(billing, db, ctx, data, assessment):
    invoice = await billing.create_invoice(db, ctx, InvoiceCreate(assessment_id=assessment.id))
    await billing.delete_invoice(db, ctx, invoice.id)
    assert not data.invoices
