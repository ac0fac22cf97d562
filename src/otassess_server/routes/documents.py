"""Business document endpoints (insurance, registrations, certificates).

Documents with an ``expiry_date`` feed the dashboard's expiry alerts.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.documents import DocumentService
from otassess_core.models import DocumentCreate, DocumentUpdate, DocumentView

from otassess_server.dependencies import get_db, get_document_service, get_request_context

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("")
async def list_documents(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: DocumentService = Depends(get_document_service),
) -> list[DocumentView]:
    return [DocumentView.model_validate(d) for d in await service.list(db, ctx)]


@router.post("", status_code=201)
async def create_document(
    body: DocumentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: DocumentService = Depends(get_document_service),
) -> DocumentView:
    return DocumentView.model_validate(await service.create(db, ctx, body))


@router.get("/{document_id}")
async def get_document(
    document_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: DocumentService = Depends(get_document_service),
) -> DocumentView:
    return DocumentView.model_validate(await service.get(db, ctx, document_id))


@router.put("/{document_id}")
async def update_document(
    document_id: uuid.UUID,
    body: DocumentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: DocumentService = Depends(get_document_service),
) -> DocumentView:
    return DocumentView.model_validate(await service.update(db, ctx, document_id, body))


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: DocumentService = Depends(get_document_service),
) -> None:
    await service.delete(db, ctx, document_id)
