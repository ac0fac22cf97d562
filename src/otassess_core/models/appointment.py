"""Appointment models: calendar entries, consent and reminder runs."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import AppointmentStatus, AppointmentType

from otassess_core.constants import DEFAULT_CONSENT_METHOD


class AppointmentCreate(BaseModel):
    client_id: Optional[uuid.UUID] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    appointment_type: AppointmentType
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    is_all_day: bool = False
    notes: Optional[str] = None
    summary: Optional[str] = None
    guidelines: Optional[str] = None
    consent_required: bool = True


class AppointmentUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""

    client_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    appointment_type: Optional[AppointmentType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    is_all_day: Optional[bool] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    summary: Optional[str] = None
    guidelines: Optional[str] = None
    consent_required: Optional[bool] = None


class ConsentRecord(BaseModel):
    given_by: str = Field(min_length=1)
    method: str = Field(default=DEFAULT_CONSENT_METHOD, min_length=1, max_length=30)


class AppointmentView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    client_id: Optional[uuid.UUID] = None
    client_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    appointment_type: AppointmentType
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    is_all_day: bool
    status: AppointmentStatus
    notes: Optional[str] = None
    summary: Optional[str] = None
    guidelines: Optional[str] = None
    reminder_date: Optional[datetime] = None
    reminder_sent: bool
    consent_required: bool
    consent_given: bool
    consent_given_at: Optional[datetime] = None
    consent_given_by: Optional[str] = None
    consent_method: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReminderRun(BaseModel):
    """Result of ``POST /api/appointments/check-reminders``."""

    reminders_sent: int
    appointment_ids: List[uuid.UUID] = Field(default_factory=list)
