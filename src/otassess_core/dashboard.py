"""DashboardAggregator: per-practitioner counts, revenue and alerts.

Computed from the database on every call; nothing is cached.

    pending assessments   draft + in_progress
    pending revenue       invoices in draft, sent or overdue
    upcoming tasks        in_progress assessments, earliest assessment date first
    expiring documents    expiry within DOCUMENT_EXPIRY_WINDOW_DAYS from now
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import INCOMPLETE_STATUSES, AssessmentStatus, InvoiceStatus
from otassess_db.repositories import DashboardRepository

from otassess_core.constants import DASHBOARD_RECENT_LIMIT, DOCUMENT_EXPIRY_WINDOW_DAYS
from otassess_core.context import RequestContext
from otassess_core.models.dashboard import (
    Alerts,
    AssessmentStats,
    ClientStats,
    CountStats,
    DashboardStats,
    ExpiringDocument,
    InvoiceStats,
    RecentAssessment,
    RecentClient,
)

_PENDING = tuple(s.value for s in INCOMPLETE_STATUSES)
_PENDING_REVENUE = (
    InvoiceStatus.DRAFT.value,
    InvoiceStatus.SENT.value,
    InvoiceStatus.OVERDUE.value,
)


def _recent(rows) -> list[RecentAssessment]:
    return [
        RecentAssessment(
            id=a.id,
            assessment_type=a.assessment_type,
            client_name=name,
            status=a.status,
            assessment_date=a.assessment_date,
        )
        for a, name in rows
    ]


class DashboardAggregator:
    def __init__(self) -> None:
        self._repo = DashboardRepository()

    async def stats(
        self, db: AsyncSession, ctx: RequestContext, *, now: datetime | None = None,
    ) -> DashboardStats:
        now = now or datetime.now(timezone.utc)
        user_id = ctx.user_id
        repo = self._repo

        pending = await repo.count_assessments(db, user_id, statuses=_PENDING)
        overdue = await repo.count_invoices(
            db, user_id, statuses=(InvoiceStatus.OVERDUE.value,),
        )
        documents = await repo.expiring_documents(
            db, user_id, now=now, until=now + timedelta(days=DOCUMENT_EXPIRY_WINDOW_DAYS),
        )

        return DashboardStats(
            clients=ClientStats(
                total=await repo.count_clients(db, user_id),
                recent=[
                    RecentClient(id=c.id, name=c.name, created_at=c.created_at)
                    for c in await repo.recent_clients(db, user_id, limit=DASHBOARD_RECENT_LIMIT)
                ],
            ),
            assessments=AssessmentStats(
                total=await repo.count_assessments(db, user_id),
                pending=pending,
                completed=await repo.count_assessments(
                    db, user_id, statuses=(AssessmentStatus.COMPLETED.value,),
                ),
                recent=_recent(
                    await repo.recent_assessments(db, user_id, limit=DASHBOARD_RECENT_LIMIT)
                ),
            ),
            invoices=InvoiceStats(
                total=await repo.count_invoices(db, user_id),
                paid=await repo.count_invoices(db, user_id, statuses=(InvoiceStatus.PAID.value,)),
                overdue=overdue,
                total_revenue=float(await repo.sum_invoice_totals(db, user_id)),
                paid_revenue=float(
                    await repo.sum_invoice_totals(db, user_id, statuses=(InvoiceStatus.PAID.value,))
                ),
                pending_revenue=float(
                    await repo.sum_invoice_totals(db, user_id, statuses=_PENDING_REVENUE)
                ),
            ),
            quotes=CountStats(total=await repo.count_quotes(db, user_id)),
            equipment=CountStats(total=await repo.count_equipment(db)),
            upcoming_tasks=_recent(
                await repo.recent_assessments(
                    db,
                    user_id,
                    limit=DASHBOARD_RECENT_LIMIT,
                    status=AssessmentStatus.IN_PROGRESS.value,
                    oldest_first=True,
                )
            ),
            alerts=Alerts(
                overdue_invoices=overdue,
                expiring_documents=len(documents),
                pending_assessments=pending,
                documents=[
                    ExpiringDocument(
                        id=d.id,
                        title=d.title,
                        document_type=d.document_type,
                        expiry_date=d.expiry_date,
                    )
                    for d in documents[:DASHBOARD_RECENT_LIMIT]
                ],
            ),
        )
