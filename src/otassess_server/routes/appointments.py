"""Appointment endpoints: calendar CRUD, client consent and reminder runs.

``POST /appointments/check-reminders`` is meant to be called on a
schedule; it claims every reminder that has come due for the caller.
"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.appointments import AppointmentService
from otassess_core.context import RequestContext
from otassess_core.models import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentView,
    ConsentRecord,
    ReminderRun,
)

from otassess_server.dependencies import get_appointment_service, get_db, get_request_context

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("")
async def list_appointments(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> list[AppointmentView]:
    return await service.list(db, ctx, start=start_date, end=end_date)


@router.post("", status_code=201)
async def create_appointment(
    body: AppointmentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentView:
    return await service.view(db, await service.create(db, ctx, body))


@router.post("/check-reminders")
async def check_reminders(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> ReminderRun:
    return await service.check_reminders(db, ctx)


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentView:
    return await service.view(db, await service.get(db, ctx, appointment_id))


@router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: uuid.UUID,
    body: AppointmentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentView:
    return await service.view(db, await service.update(db, ctx, appointment_id, body))


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> None:
    await service.delete(db, ctx, appointment_id)


@router.post("/{appointment_id}/consent")
async def record_consent(
    appointment_id: uuid.UUID,
    body: ConsentRecord,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentView:
    """Record the client's consent; the appointment becomes ``confirmed``."""
    appointment = await service.record_consent(db, ctx, appointment_id, body)
    return await service.view(db, appointment)
