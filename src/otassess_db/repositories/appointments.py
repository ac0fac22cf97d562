"""Async repository for appointments."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.appointment import Appointment
from otassess_db.models.client import Client
from otassess_db.models.enums import REMINDABLE_STATUSES


class AppointmentRepository:
    """Async read/write operations on ``appointments``, scoped by ``user_id``."""

    async def create(self, db: AsyncSession, *, user_id: str, **fields: Any) -> Appointment:
        appointment = Appointment(user_id=user_id, **fields)
        db.add(appointment)
        await db.flush()
        return appointment

    async def get_for_user(
        self, db: AsyncSession, user_id: str, appointment_id: uuid.UUID,
    ) -> Appointment | None:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id, Appointment.user_id == user_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Appointment]:
        """Appointments in start-time order, optionally within ``[start, end]``."""
        stmt = select(Appointment).where(Appointment.user_id == user_id)
        if start is not None:
            stmt = stmt.where(Appointment.start_time >= start)
        if end is not None:
            stmt = stmt.where(Appointment.start_time <= end)
        result = await db.execute(stmt.order_by(Appointment.start_time))
        return list(result.scalars().all())

    async def client_names(
        self, db: AsyncSession, client_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, str]:
        if not client_ids:
            return {}
        result = await db.execute(
            select(Client.id, Client.name).where(Client.id.in_(client_ids))
        )
        return {row.id: row.name for row in result}

    async def update(
        self, db: AsyncSession, appointment: Appointment, fields: dict[str, Any],
    ) -> Appointment:
        for key, value in fields.items():
            setattr(appointment, key, value)
        appointment.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return appointment

    async def delete(self, db: AsyncSession, appointment: Appointment) -> None:
        await db.delete(appointment)
        await db.flush()

    async def claim_due_reminders(
        self, db: AsyncSession, user_id: str, *, now: datetime,
    ) -> list[Appointment]:
        """Mark every due reminder as sent and return the claimed rows.

        Due means: reminder not yet sent, status scheduled or confirmed,
        ``reminder_date <= now`` and the appointment still in the future.
        A single ``UPDATE ... RETURNING`` claims them, so two overlapping
        runs never remind twice.
        """
        stmt = (
            update(Appointment)
            .where(
                Appointment.user_id == user_id,
                Appointment.reminder_sent.is_(False),
                Appointment.status.in_([s.value for s in REMINDABLE_STATUSES]),
                Appointment.reminder_date <= now,
                Appointment.start_time >= now,
            )
            .values(reminder_sent=True, updated_at=now)
            .returning(Appointment)
            .execution_options(synchronize_session=False)
        )
        result = await db.scalars(stmt)
        return list(result.all())
