"""AppointmentService: the practitioner's calendar.

Every appointment carries a reminder ``REMINDER_LEAD_HOURS`` before it
starts; moving the start time re-arms the reminder.  Reminders are
claimed by ``check_reminders`` and logged for the notification worker;
this service does not deliver mail itself.  Recording the client's
consent confirms the appointment.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.appointment import Appointment
from otassess_db.models.enums import AppointmentStatus
from otassess_db.repositories import AppointmentRepository, ClientRepository

from otassess_core.constants import REMINDER_LEAD_HOURS
from otassess_core.context import RequestContext
from otassess_core.errors import AnswerValidationError, NotFoundError
from otassess_core.models.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentView,
    ConsentRecord,
    ReminderRun,
)
from otassess_core.ownership import require_client

logger = logging.getLogger(__name__)


def reminder_for(start_time: datetime) -> datetime:
    return start_time - timedelta(hours=REMINDER_LEAD_HOURS)


def _check_window(start_time: datetime, end_time: datetime) -> None:
    if end_time < start_time:
        raise AnswerValidationError("end_time must not be before start_time", field="end_time")


class AppointmentService:
    def __init__(self) -> None:
        self._repo = AppointmentRepository()
        self._clients = ClientRepository()

    async def view(self, db: AsyncSession, appointment: Appointment) -> AppointmentView:
        names = await self._repo.client_names(
            db, {appointment.client_id} if appointment.client_id else set(),
        )
        view = AppointmentView.model_validate(appointment)
        view.client_name = names.get(appointment.client_id)
        return view

    async def create(
        self, db: AsyncSession, ctx: RequestContext, data: AppointmentCreate,
    ) -> Appointment:
        _check_window(data.start_time, data.end_time)
        if data.client_id is not None:
            await require_client(self._clients, db, ctx, data.client_id)
        appointment = await self._repo.create(
            db,
            user_id=ctx.user_id,
            **data.model_dump(),
            status=AppointmentStatus.SCHEDULED,
            reminder_date=reminder_for(data.start_time),
        )
        logger.info(
            "Created %s appointment %s at %s (%s)",
            data.appointment_type.value, appointment.id, data.start_time.isoformat(), ctx,
        )
        return appointment

    async def list(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AppointmentView]:
        """Appointments in start order, each with its client's name."""
        rows = await self._repo.list_by_user(db, ctx.user_id, start=start, end=end)
        names = await self._repo.client_names(db, {r.client_id for r in rows if r.client_id})
        views = []
        for row in rows:
            view = AppointmentView.model_validate(row)
            view.client_name = names.get(row.client_id)
            views.append(view)
        return views

    async def get(
        self, db: AsyncSession, ctx: RequestContext, appointment_id: uuid.UUID,
    ) -> Appointment:
        appointment = await self._repo.get_for_user(db, ctx.user_id, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        appointment_id: uuid.UUID,
        data: AppointmentUpdate,
    ) -> Appointment:
        appointment = await self.get(db, ctx, appointment_id)
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return appointment
        _check_window(
            fields.get("start_time") or appointment.start_time,
            fields.get("end_time") or appointment.end_time,
        )
        if fields.get("client_id") is not None:
            await require_client(self._clients, db, ctx, fields["client_id"])
        start_time = fields.get("start_time")
        if start_time is not None and start_time != appointment.start_time:
            fields["reminder_date"] = reminder_for(start_time)
            fields["reminder_sent"] = False
        return await self._repo.update(db, appointment, fields)

    async def delete(
        self, db: AsyncSession, ctx: RequestContext, appointment_id: uuid.UUID,
    ) -> None:
        appointment = await self.get(db, ctx, appointment_id)
        await self._repo.delete(db, appointment)
        logger.info("Deleted appointment %s (%s)", appointment_id, ctx)

    async def record_consent(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        appointment_id: uuid.UUID,
        data: ConsentRecord,
        *,
        now: datetime | None = None,
    ) -> Appointment:
        appointment = await self.get(db, ctx, appointment_id)
        appointment = await self._repo.update(
            db,
            appointment,
            {
                "consent_given": True,
                "consent_given_at": now or datetime.now(timezone.utc),
                "consent_given_by": data.given_by,
                "consent_method": data.method,
                "status": AppointmentStatus.CONFIRMED,
            },
        )
        logger.info(
            "Consent recorded for appointment %s via %s (%s)",
            appointment.id, data.method, ctx,
        )
        return appointment

    async def check_reminders(
        self, db: AsyncSession, ctx: RequestContext, *, now: datetime | None = None,
    ) -> ReminderRun:
        """Claim every due reminder for the practitioner."""
        claimed = await self._repo.claim_due_reminders(
            db, ctx.user_id, now=now or datetime.now(timezone.utc),
        )
        for appointment in claimed:
            logger.info(
                "Reminder due for appointment %s (%s) starting %s",
                appointment.id, appointment.title, appointment.start_time.isoformat(),
            )
        return ReminderRun(
            reminders_sent=len(claimed),
            appointment_ids=[a.id for a in claimed],
        )
