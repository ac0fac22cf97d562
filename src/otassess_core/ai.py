"""AIService: the assessment-aware AI features behind ``/api/ai``.

Builds each enrichment context from stored data (client, media counts,
catalog, saved responses), calls the gateway, and decides what a failure
means:

    equipment recommendations, quotes, vision, video, chat, justification
        -> UpstreamError (500 with ``details``)
    video frame guidance
        -> rule-based guidance, always succeeds

Map generation lives in ``HouseMapService`` and catalog import in
``EquipmentService``; both follow the same pattern.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.enums import AssessmentType
from otassess_db.repositories import AssessmentRepository, EquipmentRepository, ResponseRepository

from otassess_core.answers import decode_checkbox
from otassess_core.calculator import LineItem, calculate_totals
from otassess_core.constants import (
    FRAME_FALLBACK_MODEL,
    QUOTE_CATALOG_SIZE,
    RECOMMENDATION_CATALOG_SIZE,
)
from otassess_core.context import RequestContext
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.enrichment.fallbacks import build_frame_result
from otassess_core.errors import AnswerValidationError, NotFoundError, UpstreamError
from otassess_core.models.ai import (
    EquipmentRecommendationsResponse,
    GenerateQuotesResponse,
    JustificationRequest,
    JustificationResponse,
    SupportChatRequest,
    SupportChatResponse,
    TextAnalysisResponse,
    VideoAnalysisRequest,
    VideoFrameRequest,
    VideoFrameResponse,
    VisionAnalysisRequest,
)
from otassess_core.models.enrichment import (
    CatalogEntry,
    EnrichmentKind,
    EnrichmentResult,
    EquipmentJustificationContext,
    EquipmentRecommendationContext,
    GeneratedQuote,
    QuoteGenerationContext,
    SupportChatContext,
    VideoAnalysisContext,
    VideoFrameContext,
    VisionAnalysisContext,
)
from otassess_core.models.question import CheckboxQuestion
from otassess_core.ownership import require_assessment
from otassess_core.question_bank import QuestionBankStore

logger = logging.getLogger(__name__)

# Saved responses quoted in a justification prompt
MAX_FINDINGS = 15


def _require_success(result: EnrichmentResult, message: str) -> None:
    if not result.success:
        raise UpstreamError(message, details=result.details or result.error)


def recompute_quote(quote: GeneratedQuote) -> GeneratedQuote:
    """Replace model-reported totals with the calculator's."""
    totals = calculate_totals(LineItem.of(line.price, line.quantity) for line in quote.items)
    return quote.model_copy(update={
        "subtotal": float(totals.subtotal),
        "tax": float(totals.tax),
        "total": float(totals.total),
    })


class AIService:
    """
    Args:
        store: question banks, used to quote questions in justifications.
        gateway: AI enrichment gateway.
    """

    def __init__(self, store: QuestionBankStore, gateway: EnrichmentGateway | None = None) -> None:
        self._store = store
        self._gateway = gateway or EnrichmentGateway()
        self._assessments = AssessmentRepository()
        self._equipment = EquipmentRepository()
        self._responses = ResponseRepository()

    async def _catalog(self, db: AsyncSession, limit: int) -> list[CatalogEntry]:
        items = await self._equipment.list(db, limit=limit)
        return [
            CatalogEntry(
                name=i.name,
                category=i.category,
                price=float(i.price),
                government_approved=i.government_approved,
            )
            for i in items
        ]

    async def _client_name(self, db: AsyncSession, assessment: Assessment) -> str:
        return await self._assessments.get_client_name(db, assessment.client_id) or "Unknown"

    # ==================================================================
    # Assessment-based generation
    # ==================================================================

    async def equipment_recommendations(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> EquipmentRecommendationsResponse:
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        media = await self._assessments.count_media_by_type(db, assessment.id)
        catalog = await self._catalog(db, RECOMMENDATION_CATALOG_SIZE)

        result = await self._gateway.enrich(
            EnrichmentKind.EQUIPMENT_RECOMMENDATIONS,
            EquipmentRecommendationContext(
                client_name=await self._client_name(db, assessment),
                assessment_type=AssessmentType(assessment.assessment_type).value,
                location=assessment.location,
                media_count=sum(media.values()),
                catalog=catalog,
            ),
        )
        _require_success(result, "Failed to generate recommendations")
        return EquipmentRecommendationsResponse(
            recommendations=result.result, model=result.model, equipment_count=len(catalog),
        )

    async def generate_quotes(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> GenerateQuotesResponse:
        """Ask for quote options; totals are recomputed server-side."""
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        result = await self._gateway.enrich(
            EnrichmentKind.QUOTE_GENERATION,
            QuoteGenerationContext(
                client_name=await self._client_name(db, assessment),
                assessment_type=AssessmentType(assessment.assessment_type).value,
                catalog=await self._catalog(db, QUOTE_CATALOG_SIZE),
            ),
        )
        _require_success(result, "Failed to generate quotes")
        quotes = [recompute_quote(q) for q in result.result.quotes]
        return GenerateQuotesResponse(quotes=quotes, model=result.model)

    async def equipment_justification(
        self, db: AsyncSession, ctx: RequestContext, request: JustificationRequest,
    ) -> JustificationResponse:
        """Funding justification for one catalog item on one assessment.

        With ``recommendation_id`` the text is also stored on that
        recommendation, which must be for the same equipment.
        """
        assessment = await require_assessment(self._assessments, db, ctx, request.assessment_id)
        item = await self._equipment.get(db, request.equipment_id)
        if item is None:
            raise NotFoundError("Equipment", request.equipment_id)

        rec = None
        if request.recommendation_id is not None:
            rec = await self._assessments.get_recommendation(
                db, assessment.id, request.recommendation_id,
            )
            if rec is None:
                raise NotFoundError("Recommendation", request.recommendation_id)
            if rec.equipment_id != item.id:
                raise AnswerValidationError(
                    "Recommendation is for a different equipment item", field="equipment_id",
                )

        result = await self._gateway.enrich(
            EnrichmentKind.EQUIPMENT_JUSTIFICATION,
            EquipmentJustificationContext(
                client_name=await self._client_name(db, assessment),
                assessment_type=AssessmentType(assessment.assessment_type).value,
                equipment_name=item.name,
                category=item.category,
                description=item.description,
                price=float(item.price),
                findings=await self._findings(db, assessment),
            ),
        )
        _require_success(result, "Failed to generate justification")

        if rec is not None:
            await self._assessments.update_recommendation(
                db, rec, {"justification": result.result},
            )
        return JustificationResponse(justification=result.result, model=result.model)

    async def _findings(self, db: AsyncSession, assessment: Assessment) -> list[str]:
        """``question: answer`` lines, follow-up items first."""
        rows = await self._responses.list_for_assessment(db, assessment.id)
        rows = sorted(rows, key=lambda r: not r.needs_follow_up)
        lines = []
        for row in rows:
            question = self._store.get_question_by_id(row.question_id)
            if question is None or not (row.answer or row.notes):
                continue
            answer = row.answer or ""
            if isinstance(question, CheckboxQuestion):
                answer = ", ".join(sorted(decode_checkbox(answer)))
            line = f"{question.question}: {answer}"
            if row.notes:
                line += f" (notes: {row.notes})"
            lines.append(line)
            if len(lines) == MAX_FINDINGS:
                break
        return lines

    # ==================================================================
    # Media analysis
    # ==================================================================

    async def vision_analysis(self, request: VisionAnalysisRequest) -> TextAnalysisResponse:
        result = await self._gateway.enrich(
            EnrichmentKind.VISION_ANALYSIS,
            VisionAnalysisContext(**request.model_dump()),
        )
        _require_success(result, "Failed to analyze image")
        return TextAnalysisResponse(analysis=result.result, model=result.model)

    async def analyze_video_frame(self, request: VideoFrameRequest) -> VideoFrameResponse:
        """Classify one walkthrough frame and return scanning guidance.

        Never fails: without a usable model reading the result is built
        from rule-based guidance alone.
        """
        frame_count = len(request.rooms_scanned) + 1
        result = await self._gateway.enrich(
            EnrichmentKind.VIDEO_FRAME,
            VideoFrameContext(frame_base64=request.frame_base64, mime_type=request.mime_type),
        )
        analysis = build_frame_result(
            result.result if result.success else None,
            context=request.context,
            frame_count=frame_count,
        )
        return VideoFrameResponse(
            analysis=analysis,
            model=result.model if result.success else FRAME_FALLBACK_MODEL,
        )

    async def video_analysis(self, request: VideoAnalysisRequest) -> TextAnalysisResponse:
        result = await self._gateway.enrich(
            EnrichmentKind.VIDEO_ANALYSIS,
            VideoAnalysisContext(**request.model_dump()),
        )
        _require_success(result, "Failed to analyze video")
        return TextAnalysisResponse(
            analysis=result.result, model=result.model, assessment_type=request.assessment_type,
        )

    # ==================================================================
    # Support chat
    # ==================================================================

    async def support_chat(self, request: SupportChatRequest) -> SupportChatResponse:
        result = await self._gateway.enrich(
            EnrichmentKind.SUPPORT_CHAT,
            SupportChatContext(message=request.message, history=request.conversation_history),
        )
        _require_success(result, "Failed to get a support response")
        return SupportChatResponse(response=result.result, model=result.model)
