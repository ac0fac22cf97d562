"""Report endpoints.  Reports are generated once and stored as snapshots."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import ReportType

from otassess_core.context import RequestContext
from otassess_core.models import ReportRequest, ReportView
from otassess_core.reports import ReportService

from otassess_server.dependencies import get_db, get_report_service, get_request_context

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("")
async def list_reports(
    report_type: ReportType | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ReportService = Depends(get_report_service),
) -> list[ReportView]:
    return [ReportView.model_validate(r) for r in await service.list(db, ctx, report_type=report_type)]


@router.post("/generate", status_code=201)
async def generate_report(
    body: ReportRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ReportService = Depends(get_report_service),
) -> ReportView:
    return ReportView.model_validate(await service.generate(db, ctx, body))


@router.get("/{report_id}")
async def get_report(
    report_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ReportService = Depends(get_report_service),
) -> ReportView:
    return ReportView.model_validate(await service.get(db, ctx, report_id))


@router.delete("/{report_id}", status_code=204)
async def delete_report(
    report_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ReportService = Depends(get_report_service),
) -> None:
    await service.delete(db, ctx, report_id)
