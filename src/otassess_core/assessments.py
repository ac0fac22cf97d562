"""AssessmentService: assessment records, media, recommendations and summaries.

Status is never written directly except for the final ``approved`` step;
``draft``/``in_progress``/``completed`` follow from saved responses (see
``otassess_core.responses``).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment, AssessmentMedia
from otassess_db.models.enums import AssessmentStatus, AssessmentType, MediaType
from otassess_db.models.equipment import EquipmentItem, EquipmentRecommendation
from otassess_db.repositories import (
    AssessmentRepository,
    ClientRepository,
    EquipmentRepository,
    ResponseRepository,
)

from otassess_core.context import RequestContext
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.enrichment.fallbacks import summary_fallback
from otassess_core.errors import AnswerValidationError, ForbiddenError, NotFoundError
from otassess_core.models.client import (
    ArchivedAssessmentView,
    ArchiveResult,
    AssessmentCreate,
    AssessmentDetail,
    AssessmentUpdate,
    AssessmentView,
    RecommendationCreate,
    RecommendationView,
    SummaryResult,
)
from otassess_core.models.enrichment import AssessmentSummaryContext, EnrichmentKind
from otassess_core.ownership import require_assessment, require_client
from otassess_core.responses import ResponseStore
from otassess_core.retention import (
    assessment_retention_date,
    can_permanently_delete,
    days_remaining,
)

logger = logging.getLogger(__name__)


def recommendation_view(rec: EquipmentRecommendation, item: EquipmentItem) -> RecommendationView:
    return RecommendationView(
        id=rec.id,
        assessment_id=rec.assessment_id,
        equipment_id=item.id,
        equipment_name=item.name,
        category=item.category,
        price=float(item.price),
        priority=rec.priority,
        quantity=rec.quantity,
        notes=rec.notes,
        justification=rec.justification,
        created_at=rec.created_at,
    )


class AssessmentService:
    """Assessment lifecycle scoped to the requesting practitioner.

    Args:
        responses: response store, used for progress and status re-derivation.
        gateway: AI enrichment gateway for the assessment summary.
    """

    def __init__(
        self,
        responses: ResponseStore,
        gateway: EnrichmentGateway | None = None,
    ) -> None:
        self._responses = responses
        self._gateway = gateway or EnrichmentGateway()
        self._repo = AssessmentRepository()
        self._clients = ClientRepository()
        self._equipment = EquipmentRepository()
        self._response_rows = ResponseRepository()

    async def _client_names(
        self, db: AsyncSession, assessments: list[Assessment],
    ) -> dict[uuid.UUID, str | None]:
        names: dict[uuid.UUID, str | None] = {}
        for a in assessments:
            if a.client_id not in names:
                names[a.client_id] = await self._repo.get_client_name(db, a.client_id)
        return names

    # ==================================================================
    # CRUD
    # ==================================================================

    async def create(
        self, db: AsyncSession, ctx: RequestContext, data: AssessmentCreate,
    ) -> AssessmentView:
        client = await require_client(self._clients, db, ctx, data.client_id)
        assessment = await self._repo.create(
            db,
            user_id=ctx.user_id,
            client_id=client.id,
            assessment_type=data.assessment_type,
            status=AssessmentStatus.DRAFT,
            location=data.location,
            assessment_date=data.assessment_date or datetime.now(timezone.utc),
            notes=data.notes,
        )
        logger.info(
            "Created %s assessment %s for client %s (%s)",
            data.assessment_type.value, assessment.id, client.id, ctx,
        )
        return AssessmentView.model_validate(assessment).model_copy(
            update={"client_name": client.name},
        )

    async def list(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        client_id: uuid.UUID | None = None,
        status: AssessmentStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[AssessmentView]:
        rows = await self._repo.list_by_user(
            db,
            ctx.user_id,
            client_id=client_id,
            status=status.value if status else None,
            limit=limit,
            offset=offset,
        )
        names = await self._client_names(db, rows)
        return [
            AssessmentView.model_validate(a).model_copy(update={"client_name": names[a.client_id]})
            for a in rows
        ]

    async def get(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> AssessmentDetail:
        """Assessment with response/media counts and derived progress."""
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        responses = await self._response_rows.list_for_assessment(db, assessment.id)
        media = await self._repo.count_media_by_type(db, assessment.id)
        progress = await self._responses.progress(db, assessment)
        return AssessmentDetail.model_validate(
            {
                **AssessmentView.model_validate(assessment).model_dump(),
                "client_name": await self._repo.get_client_name(db, assessment.client_id),
                "response_count": len(responses),
                "media_count": sum(media.values()),
                "progress": progress,
            }
        )

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        data: AssessmentUpdate,
    ) -> AssessmentView:
        """Partial update.

        Approval is only possible from ``completed``.  Changing the
        assessment type swaps the question bank, so status is re-derived.
        """
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        fields = data.model_dump(exclude_unset=True)
        status = fields.pop("status", None)

        type_changed = (
            "assessment_type" in fields
            and fields["assessment_type"] != assessment.assessment_type
        )
        if fields:
            await self._repo.update(db, assessment, fields)
        if type_changed:
            await self._responses.refresh_status(db, assessment)

        if status == AssessmentStatus.APPROVED.value and assessment.status != AssessmentStatus.APPROVED:
            if assessment.status != AssessmentStatus.COMPLETED:
                raise AnswerValidationError(
                    "Only completed assessments can be approved", field="status",
                )
            await self._repo.set_status(db, assessment, AssessmentStatus.APPROVED)
            logger.info("Approved assessment %s (%s)", assessment.id, ctx)

        return AssessmentView.model_validate(assessment).model_copy(
            update={"client_name": await self._repo.get_client_name(db, assessment.client_id)},
        )

    # ==================================================================
    # Archive lifecycle
    # ==================================================================

    async def archive(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        *,
        reason: str,
        now: datetime | None = None,
    ) -> ArchiveResult:
        now = now or datetime.now(timezone.utc)
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        date_of_birth = await self._repo.get_client_date_of_birth(db, assessment.client_id)
        can_delete_after = assessment_retention_date(
            assessment.status, assessment.completed_at, now, date_of_birth,
        )
        await self._repo.archive(db, assessment, reason=reason, can_delete_after=can_delete_after)
        logger.info(
            "Archived assessment %s until %s (%s)", assessment.id, can_delete_after.date(), ctx,
        )
        return ArchiveResult(
            message="Assessment archived successfully",
            can_delete_after=can_delete_after,
        )

    async def list_archived(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        search: str | None = None,
        now: datetime | None = None,
    ) -> list[ArchivedAssessmentView]:
        now = now or datetime.now(timezone.utc)
        rows = await self._repo.list_archived(db, ctx.user_id, search=search)
        names = await self._client_names(db, rows)
        return [
            ArchivedAssessmentView.model_validate(a).model_copy(
                update={
                    "client_name": names[a.client_id],
                    "can_permanently_delete": can_permanently_delete(a.can_delete_after, now=now),
                }
            )
            for a in rows
        ]

    async def restore(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> AssessmentView:
        assessment = await require_assessment(self._repo, db, ctx, assessment_id, archived=True)
        client = await self._clients.get_for_user(db, ctx.user_id, assessment.client_id)
        if client is None:
            raise ForbiddenError("Restore the client before restoring its assessments.")
        await self._repo.restore(db, assessment)
        logger.info("Restored assessment %s (%s)", assessment.id, ctx)
        return AssessmentView.model_validate(assessment).model_copy(
            update={"client_name": client.name},
        )

    async def permanent_delete(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        *,
        now: datetime | None = None,
    ) -> None:
        """Delete an archived assessment and everything under it.

        Raises:
            NotFoundError: no archived assessment with this id for the requester.
            ForbiddenError: the retention period has not passed yet.
        """
        now = now or datetime.now(timezone.utc)
        assessment = await require_assessment(self._repo, db, ctx, assessment_id, archived=True)
        if not can_permanently_delete(assessment.can_delete_after, now=now):
            if assessment.can_delete_after is None:
                raise ForbiddenError(
                    "This assessment has no retention date and cannot be deleted."
                )
            remaining = days_remaining(assessment.can_delete_after, now=now)
            raise ForbiddenError(
                f"This assessment must be retained for {remaining} more days due to "
                "healthcare record retention requirements."
            )
        await self._repo.hard_delete(db, assessment)
        logger.info("Permanently deleted assessment %s (%s)", assessment_id, ctx)

    # ==================================================================
    # Media
    # ==================================================================

    async def add_media(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        *,
        media_type: MediaType,
        url: str,
        caption: str | None = None,
    ) -> AssessmentMedia:
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        return await self._repo.add_media(
            db, assessment_id=assessment.id, type=media_type.value, url=url, caption=caption,
        )

    async def list_media(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> list[AssessmentMedia]:
        await require_assessment(self._repo, db, ctx, assessment_id)
        return await self._repo.list_media(db, assessment_id)

    # ==================================================================
    # Equipment recommendations
    # ==================================================================

    async def add_recommendation(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        data: RecommendationCreate,
    ) -> RecommendationView:
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        item = await self._equipment.get(db, data.equipment_id)
        if item is None:
            raise NotFoundError("Equipment", data.equipment_id)
        rec = await self._repo.add_recommendation(
            db,
            assessment_id=assessment.id,
            equipment_id=item.id,
            priority=data.priority,
            quantity=data.quantity,
            notes=data.notes,
            justification=data.justification,
        )
        return recommendation_view(rec, item)

    async def list_recommendations(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> list[RecommendationView]:
        await require_assessment(self._repo, db, ctx, assessment_id)
        rows = await self._repo.list_recommendations(db, assessment_id)
        return [recommendation_view(rec, item) for rec, item in rows]

    async def delete_recommendation(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        recommendation_id: uuid.UUID,
    ) -> None:
        await require_assessment(self._repo, db, ctx, assessment_id)
        rec = await self._repo.get_recommendation(db, assessment_id, recommendation_id)
        if rec is None:
            raise NotFoundError("Recommendation", recommendation_id)
        await self._repo.delete_recommendation(db, rec)

    # ==================================================================
    # AI summary
    # ==================================================================

    async def analyze(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> SummaryResult:
        """Generate and store an AI summary.

        Always succeeds: when the provider fails, a canned summary built
        from the client name, type and media count is stored instead.
        """
        assessment = await require_assessment(self._repo, db, ctx, assessment_id)
        client_name = await self._repo.get_client_name(db, assessment.client_id) or "Unknown"
        media = await self._repo.count_media_by_type(db, assessment.id)
        context = AssessmentSummaryContext(
            client_name=client_name,
            assessment_type=AssessmentType(assessment.assessment_type).value,
            location=assessment.location,
            notes=assessment.notes,
            photo_count=media.get(MediaType.PHOTO.value, 0),
            video_count=media.get(MediaType.VIDEO.value, 0),
            audio_count=media.get(MediaType.AUDIO.value, 0),
        )

        result = await self._gateway.enrich(EnrichmentKind.ASSESSMENT_SUMMARY, context)
        if result.success:
            summary, fallback = result.result, False
        else:
            logger.warning(
                "Summary for assessment %s fell back: %s",
                assessment.id, result.details or result.error,
            )
            summary = summary_fallback(client_name, context.assessment_type, context.media_count)
            fallback = True

        await self._repo.update(db, assessment, {"ai_summary": summary})
        return SummaryResult(summary=summary, model=result.model, fallback=fallback)
