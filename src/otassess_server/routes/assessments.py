"""Assessment endpoints: CRUD, archive lifecycle, media, equipment
recommendations and the AI summary.

All endpoints require the ``X-User-ID`` header.  Assessments of another
practitioner are reported as 404.
"""

import uuid

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import AssessmentStatus, MediaType

from otassess_core.assessments import AssessmentService
from otassess_core.context import RequestContext
from otassess_core.media import MEDIA_MIME_TYPES, MediaStorage, media_type_for
from otassess_core.models import (
    ArchivedAssessmentView,
    ArchiveResult,
    AssessmentCreate,
    AssessmentDetail,
    AssessmentUpdate,
    AssessmentView,
    MediaView,
    RecommendationCreate,
    RecommendationView,
    SummaryResult,
)

from otassess_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, ServerSettings
from otassess_server.dependencies import (
    get_assessment_service,
    get_db,
    get_request_context,
    get_settings,
    get_storage,
)
from otassess_server.routes.clients import ArchiveRequest
from otassess_server.routes.upload import store_upload, stored_mime

router = APIRouter(prefix="/assessments", tags=["assessments"])


# ------------------------------------------------------------------
# CRUD
# ------------------------------------------------------------------

@router.get("")
async def list_assessments(
    client_id: uuid.UUID | None = Query(None),
    status: AssessmentStatus | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> list[AssessmentView]:
    """Live assessments for the current user, most recent first."""
    return await service.list(
        db, ctx, client_id=client_id, status=status, limit=limit, offset=offset,
    )


@router.post("", status_code=201)
async def create_assessment(
    body: AssessmentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentView:
    """Create a draft assessment.  404 if the client is not the caller's."""
    return await service.create(db, ctx, body)


@router.get("/archived")
async def list_archived_assessments(
    search: str | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> list[ArchivedAssessmentView]:
    return await service.list_archived(db, ctx, search=search)


@router.get("/{assessment_id}")
async def get_assessment(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetail:
    """Assessment with response/media counts and derived progress."""
    return await service.get(db, ctx, assessment_id)


@router.put("/{assessment_id}")
async def update_assessment(
    assessment_id: uuid.UUID,
    body: AssessmentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentView:
    """Partial update.

    Status can only be set to ``approved``, and only from ``completed``
    (400 otherwise); every other status is derived from the responses.
    """
    return await service.update(db, ctx, assessment_id, body)


# ------------------------------------------------------------------
# Archive lifecycle
# ------------------------------------------------------------------

@router.delete("/{assessment_id}")
async def archive_assessment(
    assessment_id: uuid.UUID,
    body: ArchiveRequest | None = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> ArchiveResult:
    """Archive the assessment and report its retention date."""
    reason = (body or ArchiveRequest()).reason
    return await service.archive(db, ctx, assessment_id, reason=reason)


@router.post("/{assessment_id}/restore")
async def restore_assessment(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentView:
    """Un-archive.  403 while the owning client is still archived."""
    return await service.restore(db, ctx, assessment_id)


@router.delete("/{assessment_id}/permanent", status_code=204)
async def permanently_delete_assessment(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> None:
    """Delete an archived assessment and everything under it.

    Returns 204 on success, 403 while the retention period is running.
    """
    await service.permanent_delete(db, ctx, assessment_id)


# ------------------------------------------------------------------
# Media
# ------------------------------------------------------------------

@router.post("/{assessment_id}/media", status_code=201)
async def upload_assessment_media(
    assessment_id: uuid.UUID,
    file: UploadFile = File(...),
    type: MediaType | None = Form(None),
    caption: str | None = Form(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
    storage: MediaStorage = Depends(get_storage),
    settings: ServerSettings = Depends(get_settings),
) -> MediaView:
    """Store a photo/video/audio file and attach it to the assessment.

    ``type`` defaults to the kind implied by the file's MIME type.
    """
    # Ownership first so nothing is written for a foreign assessment
    await service.list_media(db, ctx, assessment_id)
    media_type = type or media_type_for(stored_mime(file))
    stored = await store_upload(
        file, storage, allowed=MEDIA_MIME_TYPES, max_bytes=settings.max_upload_bytes,
    )
    media = await service.add_media(
        db, ctx, assessment_id, media_type=media_type, url=stored.url, caption=caption,
    )
    return MediaView.model_validate(media)


@router.get("/{assessment_id}/media")
async def list_assessment_media(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> list[MediaView]:
    return [MediaView.model_validate(m) for m in await service.list_media(db, ctx, assessment_id)]


# ------------------------------------------------------------------
# Equipment recommendations
# ------------------------------------------------------------------

@router.post("/{assessment_id}/equipment", status_code=201)
async def add_equipment_recommendation(
    assessment_id: uuid.UUID,
    body: RecommendationCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> RecommendationView:
    """Recommend a catalog item.  404 if the equipment does not exist."""
    return await service.add_recommendation(db, ctx, assessment_id, body)


@router.get("/{assessment_id}/equipment")
async def list_equipment_recommendations(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> list[RecommendationView]:
    return await service.list_recommendations(db, ctx, assessment_id)


@router.delete("/{assessment_id}/equipment/{recommendation_id}", status_code=204)
async def delete_equipment_recommendation(
    assessment_id: uuid.UUID,
    recommendation_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> None:
    await service.delete_recommendation(db, ctx, assessment_id, recommendation_id)


# ------------------------------------------------------------------
# AI summary
# ------------------------------------------------------------------

@router.post("/{assessment_id}/analyze")
async def analyze_assessment(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: AssessmentService = Depends(get_assessment_service),
) -> SummaryResult:
    """Generate and store an AI summary.

    Always succeeds: a provider failure stores a canned summary and
    reports ``fallback: true``.
    """
    return await service.analyze(db, ctx, assessment_id)
