"""AI-assisted endpoints under ``/ai``.

Each endpoint takes a typed body; a missing required field is rejected
before any provider is called.  When a provider fails and the feature
has no fallback the response is 500 ``{detail, details}``.  Frame
analysis and map generation always succeed, falling back to rule-based
output.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.ai import AIService
from otassess_core.context import RequestContext
from otassess_core.equipment import EquipmentService
from otassess_core.house_maps import HouseMapService
from otassess_core.models import CatalogParseResult
from otassess_core.models.ai import (
    AssessmentRef,
    EquipmentRecommendationsResponse,
    GenerateMapRequest,
    GenerateQuotesResponse,
    JustificationRequest,
    JustificationResponse,
    ParseCatalogRequest,
    SupportChatRequest,
    SupportChatResponse,
    TextAnalysisResponse,
    VideoAnalysisRequest,
    VideoFrameRequest,
    VideoFrameResponse,
    VisionAnalysisRequest,
)
from otassess_core.models.house_map import GeneratedHouseMap

from otassess_server.dependencies import (
    get_ai_service,
    get_db,
    get_equipment_service,
    get_house_map_service,
    get_request_context,
)

router = APIRouter(prefix="/ai", tags=["ai"])


# ------------------------------------------------------------------
# Assessment-scoped
# ------------------------------------------------------------------

@router.post("/equipment-recommendations")
async def equipment_recommendations(
    body: AssessmentRef,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
) -> EquipmentRecommendationsResponse:
    """Recommend catalog equipment for the assessment."""
    return await ai.equipment_recommendations(db, ctx, body.assessment_id)


@router.post("/generate-quotes")
async def generate_quotes(
    body: AssessmentRef,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
) -> GenerateQuotesResponse:
    """Draft quote options; totals are recomputed on the server."""
    return await ai.generate_quotes(db, ctx, body.assessment_id)


@router.post("/generate-equipment-justification")
async def generate_equipment_justification(
    body: JustificationRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
) -> JustificationResponse:
    """Clinical justification for one item, built from the saved responses."""
    return await ai.equipment_justification(db, ctx, body)


@router.post("/generate-3d-map")
async def generate_3d_map(
    body: GenerateMapRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    house_maps: HouseMapService = Depends(get_house_map_service),
) -> GeneratedHouseMap:
    """Build the assessment's house map from walkthrough frames.

    Replaces any existing map.  ``ai_analyzed`` is false when the
    rule-based layout was used.
    """
    return await house_maps.generate_map(db, ctx, body)


@router.post("/parse-catalog")
async def parse_catalog(
    body: ParseCatalogRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    equipment: EquipmentService = Depends(get_equipment_service),
) -> CatalogParseResult:
    """Extract equipment from catalog text and add it to the catalog.

    Best-effort per item; the counts report how many were attempted,
    created and rejected.
    """
    return await equipment.parse_catalog(db, ctx, body)


# ------------------------------------------------------------------
# Stateless
# ------------------------------------------------------------------

@router.post("/vision-analysis")
async def vision_analysis(
    body: VisionAnalysisRequest,
    ctx: RequestContext = Depends(get_request_context),
    ai: AIService = Depends(get_ai_service),
) -> TextAnalysisResponse:
    return await ai.vision_analysis(body)


@router.post("/analyze-video-frame")
async def analyze_video_frame(
    body: VideoFrameRequest,
    ctx: RequestContext = Depends(get_request_context),
    ai: AIService = Depends(get_ai_service),
) -> VideoFrameResponse:
    """Identify the room in a walkthrough frame and suggest what to film next."""
    return await ai.analyze_video_frame(body)


@router.post("/video-analysis")
async def video_analysis(
    body: VideoAnalysisRequest,
    ctx: RequestContext = Depends(get_request_context),
    ai: AIService = Depends(get_ai_service),
) -> TextAnalysisResponse:
    return await ai.video_analysis(body)


@router.post("/support-chat")
async def support_chat(
    body: SupportChatRequest,
    ctx: RequestContext = Depends(get_request_context),
    ai: AIService = Depends(get_ai_service),
) -> SupportChatResponse:
    return await ai.support_chat(body)
