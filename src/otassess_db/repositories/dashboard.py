"""Read-only aggregate queries backing the practitioner dashboard.

Nothing here is cached; every call hits the database.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.billing import Invoice, Quote
from otassess_db.models.client import Client
from otassess_db.models.document import BusinessDocument
from otassess_db.models.equipment import EquipmentItem


class DashboardRepository:
    """Counts, sums and short recent-item lists scoped by ``user_id``."""

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    async def count_clients(self, db: AsyncSession, user_id: str) -> int:
        stmt = select(func.count()).select_from(Client).where(
            Client.user_id == user_id, Client.is_archived.is_(False),
        )
        return (await db.execute(stmt)).scalar_one()

    async def count_assessments(
        self, db: AsyncSession, user_id: str, *, statuses: tuple[str, ...] | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Assessment).where(
            Assessment.user_id == user_id, Assessment.is_archived.is_(False),
        )
        if statuses is not None:
            stmt = stmt.where(Assessment.status.in_(statuses))
        return (await db.execute(stmt)).scalar_one()

    async def count_invoices(
        self, db: AsyncSession, user_id: str, *, statuses: tuple[str, ...] | None = None,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(Invoice)
            .join(Assessment, Assessment.id == Invoice.assessment_id)
            .where(Assessment.user_id == user_id)
        )
        if statuses is not None:
            stmt = stmt.where(Invoice.status.in_(statuses))
        return (await db.execute(stmt)).scalar_one()

    async def count_quotes(self, db: AsyncSession, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Quote)
            .join(Assessment, Assessment.id == Quote.assessment_id)
            .where(Assessment.user_id == user_id)
        )
        return (await db.execute(stmt)).scalar_one()

    async def count_equipment(self, db: AsyncSession) -> int:
        stmt = select(func.count()).select_from(EquipmentItem)
        return (await db.execute(stmt)).scalar_one()

    async def sum_invoice_totals(
        self, db: AsyncSession, user_id: str, *, statuses: tuple[str, ...] | None = None,
    ) -> Decimal:
        """Sum of ``Invoice.total``; zero when there are no matching invoices."""
        stmt = (
            select(func.coalesce(func.sum(Invoice.total), 0))
            .join(Assessment, Assessment.id == Invoice.assessment_id)
            .where(Assessment.user_id == user_id)
        )
        if statuses is not None:
            stmt = stmt.where(Invoice.status.in_(statuses))
        return Decimal((await db.execute(stmt)).scalar_one())

    # ------------------------------------------------------------------
    # Recent / upcoming lists
    # ------------------------------------------------------------------

    async def recent_clients(
        self, db: AsyncSession, user_id: str, *, limit: int,
    ) -> list[Client]:
        stmt = (
            select(Client)
            .where(Client.user_id == user_id, Client.is_archived.is_(False))
            .order_by(Client.created_at.desc())
            .limit(limit)
        )
        return list((await db.execute(stmt)).scalars().all())

    async def recent_assessments(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        limit: int,
        status: str | None = None,
        oldest_first: bool = False,
    ) -> list[tuple[Assessment, str]]:
        """Assessments with their client's name.

        Default order is newest created first; ``oldest_first`` orders by
        ascending assessment date (upcoming work).
        """
        stmt = (
            select(Assessment, Client.name)
            .join(Client, Client.id == Assessment.client_id)
            .where(Assessment.user_id == user_id, Assessment.is_archived.is_(False))
        )
        if status is not None:
            stmt = stmt.where(Assessment.status == status)
        if oldest_first:
            stmt = stmt.order_by(Assessment.assessment_date.asc())
        else:
            stmt = stmt.order_by(Assessment.created_at.desc())
        result = await db.execute(stmt.limit(limit))
        return [(assessment, name) for assessment, name in result.all()]

    async def expiring_documents(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        now: datetime,
        until: datetime,
        limit: int | None = None,
    ) -> list[BusinessDocument]:
        stmt = (
            select(BusinessDocument)
            .where(
                BusinessDocument.user_id == user_id,
                BusinessDocument.expiry_date.is_not(None),
                BusinessDocument.expiry_date >= now,
                BusinessDocument.expiry_date <= until,
            )
            .order_by(BusinessDocument.expiry_date.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await db.execute(stmt)).scalars().all())
