"""Dashboard statistics payload."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class RecentClient(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime


class RecentAssessment(BaseModel):
    id: uuid.UUID
    assessment_type: str
    client_name: str
    status: str
    assessment_date: datetime


class ClientStats(BaseModel):
    total: int
    recent: List[RecentClient]


class AssessmentStats(BaseModel):
    total: int
    pending: int
    completed: int
    recent: List[RecentAssessment]


class InvoiceStats(BaseModel):
    total: int
    paid: int
    overdue: int
    total_revenue: float
    paid_revenue: float
    pending_revenue: float


class CountStats(BaseModel):
    total: int


class ExpiringDocument(BaseModel):
    id: uuid.UUID
    title: str
    document_type: str
    expiry_date: Optional[datetime] = None


class Alerts(BaseModel):
    overdue_invoices: int
    expiring_documents: int
    pending_assessments: int
    documents: List[ExpiringDocument]


class DashboardStats(BaseModel):
    clients: ClientStats
    assessments: AssessmentStats
    invoices: InvoiceStats
    quotes: CountStats
    equipment: CountStats
    upcoming_tasks: List[RecentAssessment]
    alerts: Alerts
