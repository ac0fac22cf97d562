"""Async repository for saved reports and the source rows reports are built from.

Source queries return plain rows over ``[start, end]``; aggregation into
report data happens in the service layer.
"""

import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.appointment import Appointment
from otassess_db.models.assessment import Assessment, AssessmentMedia
from otassess_db.models.billing import Invoice
from otassess_db.models.client import Client
from otassess_db.models.enums import AssessmentStatus
from otassess_db.models.equipment import EquipmentItem, EquipmentRecommendation
from otassess_db.models.report import Report


class ReportRepository:
    """Async read/write operations on ``reports``, scoped by ``user_id``."""

    async def create(self, db: AsyncSession, *, user_id: str, **fields) -> Report:
        report = Report(user_id=user_id, **fields)
        db.add(report)
        await db.flush()
        return report

    async def get_for_user(
        self, db: AsyncSession, user_id: str, report_id: uuid.UUID,
    ) -> Report | None:
        stmt = select(Report).where(Report.id == report_id, Report.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self, db: AsyncSession, user_id: str, *, report_type: str | None = None,
    ) -> list[Report]:
        stmt = select(Report).where(Report.user_id == user_id)
        if report_type:
            stmt = stmt.where(Report.report_type == report_type)
        result = await db.execute(stmt.order_by(Report.created_at.desc()))
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, report: Report) -> None:
        await db.delete(report)
        await db.flush()

    # ------------------------------------------------------------------
    # Source rows
    # ------------------------------------------------------------------

    async def invoices_in_range(
        self, db: AsyncSession, user_id: str, start: datetime, end: datetime,
    ) -> list[tuple[Invoice, Client]]:
        """Invoices created in range with the client they bill, newest first."""
        stmt = (
            select(Invoice, Client)
            .join(Assessment, Assessment.id == Invoice.assessment_id)
            .join(Client, Client.id == Assessment.client_id)
            .where(
                Assessment.user_id == user_id,
                Invoice.created_at >= start,
                Invoice.created_at <= end,
            )
            .order_by(Invoice.created_at.desc())
        )
        result = await db.execute(stmt)
        return [(invoice, client) for invoice, client in result.all()]

    async def assessments_created_in_range(
        self, db: AsyncSession, user_id: str, start: datetime, end: datetime,
    ) -> list[tuple[Assessment, Client]]:
        stmt = (
            select(Assessment, Client)
            .join(Client, Client.id == Assessment.client_id)
            .where(
                Assessment.user_id == user_id,
                Assessment.created_at >= start,
                Assessment.created_at <= end,
            )
            .order_by(Assessment.created_at.desc())
        )
        result = await db.execute(stmt)
        return [(assessment, client) for assessment, client in result.all()]

    async def completed_assessments_in_range(
        self, db: AsyncSession, user_id: str, start: datetime, end: datetime,
    ) -> list[tuple[Assessment, Client]]:
        """Completed assessments whose assessment date falls in range."""
        stmt = (
            select(Assessment, Client)
            .join(Client, Client.id == Assessment.client_id)
            .where(
                Assessment.user_id == user_id,
                Assessment.status == AssessmentStatus.COMPLETED.value,
                Assessment.assessment_date >= start,
                Assessment.assessment_date <= end,
            )
            .order_by(Assessment.assessment_date.desc())
        )
        result = await db.execute(stmt)
        return [(assessment, client) for assessment, client in result.all()]

    async def appointments_in_range(
        self, db: AsyncSession, user_id: str, start: datetime, end: datetime,
    ) -> list[Appointment]:
        stmt = select(Appointment).where(
            Appointment.user_id == user_id,
            Appointment.start_time >= start,
            Appointment.start_time <= end,
        )
        result = await db.execute(stmt.order_by(Appointment.start_time))
        return list(result.scalars().all())

    async def count_new_clients(
        self, db: AsyncSession, user_id: str, start: datetime, end: datetime,
    ) -> int:
        stmt = select(func.count()).select_from(Client).where(
            Client.user_id == user_id,
            Client.created_at >= start,
            Client.created_at <= end,
        )
        return (await db.execute(stmt)).scalar_one()

    async def count_active_clients(self, db: AsyncSession, user_id: str) -> int:
        stmt = select(func.count()).select_from(Client).where(
            Client.user_id == user_id, Client.is_archived.is_(False),
        )
        return (await db.execute(stmt)).scalar_one()

    async def recommendations_for(
        self, db: AsyncSession, assessment_ids: list[uuid.UUID],
    ) -> list[tuple[uuid.UUID, str, str]]:
        """``(assessment_id, equipment category, priority)`` per recommendation."""
        if not assessment_ids:
            return []
        stmt = (
            select(
                EquipmentRecommendation.assessment_id,
                EquipmentItem.category,
                EquipmentRecommendation.priority,
            )
            .join(EquipmentItem, EquipmentItem.id == EquipmentRecommendation.equipment_id)
            .where(EquipmentRecommendation.assessment_id.in_(assessment_ids))
        )
        result = await db.execute(stmt)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def media_counts(
        self, db: AsyncSession, assessment_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, int]:
        if not assessment_ids:
            return {}
        stmt = (
            select(AssessmentMedia.assessment_id, func.count())
            .where(AssessmentMedia.assessment_id.in_(assessment_ids))
            .group_by(AssessmentMedia.assessment_id)
        )
        result = await db.execute(stmt)
        return {assessment_id: count for assessment_id, count in result.all()}
