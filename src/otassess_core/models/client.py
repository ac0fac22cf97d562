"""Client and assessment models exchanged with API callers.

These are decoupled from the ORM rows in ``otassess_db`` so that callers
never see database internals.  ``*View`` models are built from ORM rows
with ``model_validate(row)``.
"""

import uuid
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import AssessmentStatus, AssessmentType, MediaType


class _RowView(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ------------------------------------------------------------------
# Clients
# ------------------------------------------------------------------

class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ClientUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ClientView(_RowView):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_archived: bool = False
    archived_at: Optional[datetime] = None
    deletion_reason: Optional[str] = None
    can_delete_after: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ArchivedClientView(ClientView):
    can_permanently_delete: bool = False


# ------------------------------------------------------------------
# Assessments
# ------------------------------------------------------------------

class AssessmentCreate(BaseModel):
    client_id: uuid.UUID
    assessment_type: AssessmentType = AssessmentType.HOME
    location: Optional[str] = None
    assessment_date: Optional[datetime] = None
    notes: Optional[str] = None


class AssessmentUpdate(BaseModel):
    """Partial update.

    ``status`` may only be set to ``approved`` by hand; the other states
    are derived from saved responses.
    """

    assessment_type: Optional[AssessmentType] = None
    status: Optional[Literal["approved"]] = None
    location: Optional[str] = None
    assessment_date: Optional[datetime] = None
    notes: Optional[str] = None
    report_generated: Optional[bool] = None


class AssessmentView(_RowView):
    id: uuid.UUID
    client_id: uuid.UUID
    client_name: Optional[str] = None
    assessment_type: AssessmentType
    status: AssessmentStatus
    location: Optional[str] = None
    assessment_date: datetime
    notes: Optional[str] = None
    ai_summary: Optional[str] = None
    report_generated: bool = False
    completed_at: Optional[datetime] = None
    is_archived: bool = False
    archived_at: Optional[datetime] = None
    deletion_reason: Optional[str] = None
    can_delete_after: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AssessmentProgress(BaseModel):
    """``answered / total`` over distinct question ids with a saved response."""

    answered: int
    total: int

    @property
    def fraction(self) -> float:
        return self.answered / self.total if self.total else 0.0


class AssessmentDetail(AssessmentView):
    response_count: int = 0
    media_count: int = 0
    progress: AssessmentProgress


class ArchivedAssessmentView(AssessmentView):
    can_permanently_delete: bool = False


class ArchiveResult(BaseModel):
    success: bool = True
    message: str
    archived_count: int = 1
    can_delete_after: datetime


# ------------------------------------------------------------------
# Media and equipment recommendations
# ------------------------------------------------------------------

class MediaView(_RowView):
    id: uuid.UUID
    assessment_id: uuid.UUID
    type: MediaType
    url: str
    caption: Optional[str] = None
    ai_analysis: Optional[str] = None
    created_at: datetime


class RecommendationCreate(BaseModel):
    equipment_id: uuid.UUID
    priority: Literal["high", "medium", "low"] = "medium"
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = None
    justification: Optional[str] = None


class RecommendationView(BaseModel):
    id: uuid.UUID
    assessment_id: uuid.UUID
    equipment_id: uuid.UUID
    equipment_name: str
    category: str
    price: float
    priority: str
    quantity: int
    notes: Optional[str] = None
    justification: Optional[str] = None
    created_at: datetime


class SummaryResult(BaseModel):
    """Outcome of ``POST /assessments/{id}/analyze``; always succeeds."""

    success: bool = True
    summary: str
    model: Optional[str] = None
    fallback: bool = False
