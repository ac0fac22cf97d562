"""Quote and invoice models.

Line-item prices arrive as JSON numbers and are converted to ``Decimal``
by the calculator before any arithmetic.  Stored totals are ``Numeric``
columns and are exposed as floats.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import InvoiceStatus, QuoteStatus


# ------------------------------------------------------------------
# Quotes
# ------------------------------------------------------------------

class QuoteItem(BaseModel):
    equipment_id: Optional[uuid.UUID] = None
    name: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0)


class QuoteCreate(BaseModel):
    assessment_id: uuid.UUID
    option_name: str = Field(min_length=1)
    items: List[QuoteItem] = Field(default_factory=list)
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None


class QuoteUpdate(BaseModel):
    """Partial update; totals are recomputed whenever ``items`` is given."""

    option_name: Optional[str] = Field(default=None, min_length=1)
    items: Optional[List[QuoteItem]] = None
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None
    status: Optional[QuoteStatus] = None


class QuoteView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    quote_number: str
    option_name: str
    items: List[QuoteItem]
    subtotal: float
    tax: float
    total: float
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None
    status: QuoteStatus
    created_at: datetime
    updated_at: datetime


# ------------------------------------------------------------------
# Invoices
# ------------------------------------------------------------------

class InvoiceItem(BaseModel):
    description: str = Field(min_length=1)
    quantity: float = Field(default=1, gt=0)
    rate: float = Field(ge=0)


class InvoiceCreate(BaseModel):
    """Billed amount is the items plus ``hourly_rate * hours_worked`` when both are set."""

    assessment_id: uuid.UUID
    items: List[InvoiceItem] = Field(default_factory=list)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    hours_worked: Optional[float] = Field(default=None, ge=0)
    due_date: Optional[datetime] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    items: Optional[List[InvoiceItem]] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    hours_worked: Optional[float] = Field(default=None, ge=0)
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    status: Optional[InvoiceStatus] = None


class InvoiceView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    invoice_number: str
    items: List[InvoiceItem]
    subtotal: float
    tax: float
    total: float
    hourly_rate: Optional[float] = None
    hours_worked: Optional[float] = None
    status: InvoiceStatus
    due_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
