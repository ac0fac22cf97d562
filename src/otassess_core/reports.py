"""ReportService: financial, operational, clinical and custom practice reports.

A report is generated once over ``[start_date, end_date]`` and stored as
a snapshot.  The builders below are pure functions over source rows so
the aggregation rules can be read (and tested) without a database:

    financial    invoice totals by status, monthly revenue, top clients
    operational  assessments, appointments and new clients in range
    clinical     completed assessments, equipment recommended, client ages
    custom       counts for the sections named in ``columns``

Money is summed as ``Decimal`` and reported as a float rounded to cents.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter, defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import (
    REMINDABLE_STATUSES,
    AppointmentStatus,
    AssessmentStatus,
    InvoiceStatus,
    ReportType,
)
from otassess_db.models.report import Report
from otassess_db.repositories import ReportRepository

from otassess_core.constants import REPORT_RECENT_ASSESSMENTS, REPORT_TOP_CLIENTS
from otassess_core.context import RequestContext
from otassess_core.errors import AnswerValidationError, NotFoundError
from otassess_core.models.report import CUSTOM_COLUMNS, ReportRequest
from otassess_core.retention import age_on

logger = logging.getLogger(__name__)


def _money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01")))


def _sum(values: Iterable[Any]) -> Decimal:
    return sum((Decimal(v) for v in values), Decimal(0))


def _value(member: Any) -> str:
    return getattr(member, "value", member)


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------

def financial_report(invoices: list[tuple[Any, Any]]) -> dict[str, Any]:
    """Revenue from ``(invoice, client)`` pairs, newest invoice first.

    Pending revenue counts ``sent`` invoices only; drafts have not been
    issued yet and overdue invoices are reported separately.
    """
    def total_of(status: InvoiceStatus) -> Decimal:
        return _sum(i.total for i, _ in invoices if _value(i.status) == status.value)

    def count_of(status: InvoiceStatus) -> int:
        return sum(1 for i, _ in invoices if _value(i.status) == status.value)

    total = _sum(i.total for i, _ in invoices)

    monthly: dict[str, dict[str, Decimal]] = defaultdict(
        lambda: {"total": Decimal(0), "paid": Decimal(0), "pending": Decimal(0)}
    )
    by_client: dict[uuid.UUID, dict[str, Any]] = {}
    for invoice, client in invoices:
        bucket = monthly[invoice.created_at.strftime("%Y-%m")]
        bucket["total"] += Decimal(invoice.total)
        key = "paid" if _value(invoice.status) == InvoiceStatus.PAID.value else "pending"
        bucket[key] += Decimal(invoice.total)

        entry = by_client.setdefault(
            client.id, {"name": client.name, "revenue": Decimal(0), "invoice_count": 0},
        )
        entry["revenue"] += Decimal(invoice.total)
        entry["invoice_count"] += 1

    top = sorted(by_client.values(), key=lambda e: e["revenue"], reverse=True)
    return {
        "summary": {
            "total_revenue": _money(total),
            "paid_revenue": _money(total_of(InvoiceStatus.PAID)),
            "pending_revenue": _money(total_of(InvoiceStatus.SENT)),
            "overdue_revenue": _money(total_of(InvoiceStatus.OVERDUE)),
            "total_invoices": len(invoices),
            "paid_invoices": count_of(InvoiceStatus.PAID),
            "pending_invoices": count_of(InvoiceStatus.SENT),
            "overdue_invoices": count_of(InvoiceStatus.OVERDUE),
            "average_invoice_value": _money(total / len(invoices)) if invoices else 0.0,
        },
        "monthly_revenue": {
            month: {k: _money(v) for k, v in bucket.items()}
            for month, bucket in sorted(monthly.items())
        },
        "top_clients": [
            {**e, "revenue": _money(e["revenue"])} for e in top[:REPORT_TOP_CLIENTS]
        ],
        "invoices": [
            {
                "id": str(invoice.id),
                "invoice_number": invoice.invoice_number,
                "client_name": client.name,
                "amount": _money(Decimal(invoice.total)),
                "status": _value(invoice.status),
                "due_date": _iso(invoice.due_date),
                "paid_date": _iso(invoice.paid_date),
                "created_at": _iso(invoice.created_at),
            }
            for invoice, client in invoices
        ],
    }


def operational_report(
    assessments: list[tuple[Any, Any]],
    appointments: list[Any],
    *,
    new_clients: int,
    active_clients: int,
) -> dict[str, Any]:
    """Workload from assessments created and appointments starting in range."""
    daily: dict[str, dict[str, int]] = defaultdict(lambda: {"assessments": 0, "appointments": 0})
    for assessment, _ in assessments:
        daily[assessment.created_at.date().isoformat()]["assessments"] += 1
    for appointment in appointments:
        daily[appointment.start_time.date().isoformat()]["appointments"] += 1

    upcoming = {s.value for s in REMINDABLE_STATUSES}
    return {
        "summary": {
            "total_assessments": len(assessments),
            "completed_assessments": sum(
                1 for a, _ in assessments if _value(a.status) == AssessmentStatus.COMPLETED.value
            ),
            "pending_assessments": sum(
                1 for a, _ in assessments if _value(a.status) == AssessmentStatus.DRAFT.value
            ),
            "total_appointments": len(appointments),
            "completed_appointments": sum(
                1 for a in appointments if _value(a.status) == AppointmentStatus.COMPLETED.value
            ),
            "upcoming_appointments": sum(
                1 for a in appointments if _value(a.status) in upcoming
            ),
            "new_clients": new_clients,
            "total_clients": active_clients,
        },
        "assessments_by_type": dict(Counter(_value(a.assessment_type) for a, _ in assessments)),
        "assessments_by_status": dict(Counter(_value(a.status) for a, _ in assessments)),
        "appointments_by_type": dict(Counter(_value(a.appointment_type) for a in appointments)),
        "appointments_by_status": dict(Counter(_value(a.status) for a in appointments)),
        "daily_activity": dict(sorted(daily.items())),
        "recent_assessments": [
            {
                "id": str(assessment.id),
                "client_name": client.name,
                "type": _value(assessment.assessment_type),
                "status": _value(assessment.status),
                "date": _iso(assessment.assessment_date),
                "created_at": _iso(assessment.created_at),
            }
            for assessment, client in assessments[:REPORT_RECENT_ASSESSMENTS]
        ],
    }


def clinical_report(
    assessments: list[tuple[Any, Any]],
    recommendations: list[tuple[uuid.UUID, str, str]],
    media_counts: dict[uuid.UUID, int],
    *,
    today: date,
) -> dict[str, Any]:
    """Outcomes of completed assessments.

    ``recommendations`` holds ``(assessment_id, category, priority)``
    triples.  Ages are whole years on ``today``; clients without a date
    of birth are left out of the age figures.
    """
    by_category: dict[str, dict[str, Any]] = {}
    per_assessment: Counter = Counter()
    for assessment_id, category, priority in recommendations:
        entry = by_category.setdefault(category, {"count": 0, "priority": {}})
        entry["count"] += 1
        entry["priority"][priority] = entry["priority"].get(priority, 0) + 1
        per_assessment[assessment_id] += 1

    def age_of(client: Any) -> int | None:
        dob = client.date_of_birth
        return age_on(dob, today) if dob else None

    ages = [age for age in (age_of(c) for _, c in assessments) if age is not None]
    return {
        "summary": {
            "total_assessments": len(assessments),
            "clients_assessed": len({a.client_id for a, _ in assessments}),
            "total_equipment_recommendations": len(recommendations),
            "total_media_captured": sum(media_counts.get(a.id, 0) for a, _ in assessments),
            "average_client_age": round(sum(ages) / len(ages)) if ages else 0,
            "age_range": f"{min(ages)} - {max(ages)}" if ages else "N/A",
        },
        "assessment_types": dict(Counter(_value(a.assessment_type) for a, _ in assessments)),
        "equipment_recommendations": by_category,
        "assessments": [
            {
                "id": str(assessment.id),
                "client_name": client.name,
                "client_age": age_of(client),
                "type": _value(assessment.assessment_type),
                "date": _iso(assessment.assessment_date),
                "equipment_count": per_assessment[assessment.id],
                "media_count": media_counts.get(assessment.id, 0),
                "location": assessment.location,
            }
            for assessment, client in assessments
        ],
    }


def selected_columns(columns: list[str] | None) -> tuple[str, ...]:
    """Sections of a custom report; all of them when none are named."""
    if not columns:
        return CUSTOM_COLUMNS
    unknown = sorted(set(columns) - set(CUSTOM_COLUMNS))
    if unknown:
        raise AnswerValidationError(
            f"Unknown report columns: {', '.join(unknown)}", field="columns",
        )
    return tuple(c for c in CUSTOM_COLUMNS if c in columns)


class ReportService:
    def __init__(self) -> None:
        self._repo = ReportRepository()

    async def _build(
        self, db: AsyncSession, ctx: RequestContext, request: ReportRequest, *, today: date,
    ) -> dict[str, Any]:
        user_id, start, end = ctx.user_id, request.start_date, request.end_date

        if request.report_type is ReportType.FINANCIAL:
            return financial_report(await self._repo.invoices_in_range(db, user_id, start, end))

        if request.report_type is ReportType.OPERATIONAL:
            return operational_report(
                await self._repo.assessments_created_in_range(db, user_id, start, end),
                await self._repo.appointments_in_range(db, user_id, start, end),
                new_clients=await self._repo.count_new_clients(db, user_id, start, end),
                active_clients=await self._repo.count_active_clients(db, user_id),
            )

        if request.report_type is ReportType.CLINICAL:
            assessments = await self._repo.completed_assessments_in_range(db, user_id, start, end)
            ids = [a.id for a, _ in assessments]
            return clinical_report(
                assessments,
                await self._repo.recommendations_for(db, ids),
                await self._repo.media_counts(db, ids),
                today=today,
            )

        data: dict[str, Any] = {
            "date_range": {"start": start.isoformat(), "end": end.isoformat()},
        }
        for column in selected_columns(request.columns):
            if column == "clients":
                data["clients"] = await self._repo.count_active_clients(db, user_id)
            elif column == "assessments":
                rows = await self._repo.assessments_created_in_range(db, user_id, start, end)
                data["assessments"] = len(rows)
            elif column == "invoices":
                rows = await self._repo.invoices_in_range(db, user_id, start, end)
                data["invoices"] = {
                    "count": len(rows),
                    "total_revenue": _money(_sum(i.total for i, _ in rows)),
                }
            elif column == "appointments":
                rows = await self._repo.appointments_in_range(db, user_id, start, end)
                data["appointments"] = len(rows)
        return data

    async def generate(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        request: ReportRequest,
        *,
        now: datetime | None = None,
    ) -> Report:
        if request.end_date < request.start_date:
            raise AnswerValidationError("end_date must not be before start_date", field="end_date")
        now = now or datetime.now(timezone.utc)
        data = await self._build(db, ctx, request, today=now.date())
        report = await self._repo.create(
            db,
            user_id=ctx.user_id,
            report_type=request.report_type,
            title=request.title,
            description=request.description,
            start_date=request.start_date,
            end_date=request.end_date,
            data=data,
            filters=request.filters,
            columns=request.columns,
            status="generated",
        )
        logger.info(
            "Generated %s report %s (%s)", request.report_type.value, report.id, ctx,
        )
        return report

    async def list(
        self, db: AsyncSession, ctx: RequestContext, *, report_type: ReportType | None = None,
    ) -> list[Report]:
        return await self._repo.list_by_user(
            db, ctx.user_id, report_type=report_type.value if report_type else None,
        )

    async def get(self, db: AsyncSession, ctx: RequestContext, report_id: uuid.UUID) -> Report:
        report = await self._repo.get_for_user(db, ctx.user_id, report_id)
        if report is None:
            raise NotFoundError("Report", report_id)
        return report

    async def delete(self, db: AsyncSession, ctx: RequestContext, report_id: uuid.UUID) -> None:
        report = await self.get(db, ctx, report_id)
        await self._repo.delete(db, report)
