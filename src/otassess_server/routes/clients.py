"""Client endpoints: CRUD plus archive, restore and permanent delete.

All endpoints require the ``X-User-ID`` header; a client belonging to
another practitioner is reported as 404.
"""

import uuid

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.clients import ClientService
from otassess_core.context import RequestContext
from otassess_core.models import (
    ArchivedClientView,
    ArchiveResult,
    ClientCreate,
    ClientUpdate,
    ClientView,
)

from otassess_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from otassess_server.dependencies import get_client_service, get_db, get_request_context

router = APIRouter(prefix="/clients", tags=["clients"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class ArchiveRequest(BaseModel):
    """Optional body for the archiving DELETE endpoints."""
    reason: str = "No reason provided"


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
async def list_clients(
    search: str | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> list[ClientView]:
    """Live clients for the current user, matched on name/email/phone."""
    clients = await service.list(db, ctx, search=search, limit=limit, offset=offset)
    return [ClientView.model_validate(c) for c in clients]


@router.post("", status_code=201)
async def create_client(
    body: ClientCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientView:
    return ClientView.model_validate(await service.create(db, ctx, body))


@router.get("/archived")
async def list_archived_clients(
    search: str | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> list[ArchivedClientView]:
    """Archived clients with ``can_permanently_delete`` resolved against now."""
    return await service.list_archived(db, ctx, search=search)


@router.get("/{client_id}")
async def get_client(
    client_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientView:
    return ClientView.model_validate(await service.get(db, ctx, client_id))


@router.put("/{client_id}")
async def update_client(
    client_id: uuid.UUID,
    body: ClientUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientView:
    """Partial update; only the fields present in the body are written."""
    return ClientView.model_validate(await service.update(db, ctx, client_id, body))


@router.delete("/{client_id}")
async def archive_client(
    client_id: uuid.UUID,
    body: ArchiveRequest | None = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ArchiveResult:
    """Archive (soft-delete) the client and its live assessments.

    Returns the retention date after which permanent deletion is allowed.
    """
    reason = (body or ArchiveRequest()).reason
    return await service.archive(db, ctx, client_id, reason=reason)


@router.post("/{client_id}/restore")
async def restore_client(
    client_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientView:
    """Un-archive the client and its archived assessments.  404 if not archived."""
    return ClientView.model_validate(await service.restore(db, ctx, client_id))


@router.delete("/{client_id}/permanent", status_code=204)
async def permanently_delete_client(
    client_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> None:
    """Delete an archived client for good.

    Returns 204 on success, 403 while the retention period is running,
    404 if there is no such archived client.
    """
    await service.permanent_delete(db, ctx, client_id)
