"""EnrichmentGateway: one entry point for every AI-assisted feature.

``enrich(kind, context)`` renders the kind's prompt, calls exactly one
provider, and decodes the reply.  It never raises for provider trouble:
network errors, timeouts, non-2xx replies, empty completions, malformed or
schema-violating JSON, and unconfigured providers all come back as
``EnrichmentResult(success=False, ...)``.  Callers decide whether to fall
back to a rule-based result or surface the failure.

Cancellation is not a failure; ``asyncio.CancelledError`` propagates.

Usage::

    gateway = EnrichmentGateway(ProviderSet.from_keys(openai_api_key=...))
    result = await gateway.enrich(
        EnrichmentKind.RESPONSE_ANALYSIS,
        ResponseAnalysisContext(ai_prompt=..., question=..., answer="Yes"),
    )
    if result.success:
        print(result.result)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable

import httpx
from pydantic import BaseModel, ValidationError

from otassess_core.constants import (
    CATALOG_MODEL,
    CHAT_HISTORY_TURNS,
    FRAME_MODEL,
    JUSTIFICATION_MODEL,
    MAP_VISION_MODEL,
    MAX_MAP_FRAMES,
    MIN_ROOM_CONFIDENCE,
    RECOMMENDATION_MODEL,
    RESPONSE_ANALYSIS_MODEL,
    SUMMARY_MODEL,
    SUPPORT_CHAT_MODEL,
    TAX_RATE,
    VIDEO_MODEL,
    VISION_MODEL,
)
from otassess_core.enrichment.parsing import parse_structured
from otassess_core.enrichment.providers import (
    CompletionRequest,
    InlineMedia,
    ModelProvider,
    ProviderSet,
)
from otassess_core.errors import StructuredOutputError, UpstreamError
from otassess_core.models.enrichment import (
    AssessmentSummaryContext,
    CatalogExtraction,
    CatalogParsingContext,
    EnrichmentKind,
    EnrichmentResult,
    EquipmentJustificationContext,
    EquipmentRecommendationContext,
    FrameAnalysis,
    QuoteGenerationContext,
    QuoteOptions,
    ResponseAnalysisContext,
    RoomMapContext,
    SupportChatContext,
    VideoAnalysisContext,
    VideoFrameContext,
    VisionAnalysisContext,
)
from otassess_core.prompt.manager import PromptManager

logger = logging.getLogger(__name__)

# Errors that turn into success=False.  Anything else is a bug and propagates.
_SOFT_FAILURES = (httpx.HTTPError, UpstreamError, StructuredOutputError, ValidationError)

ROOM_TYPES = [
    "living", "kitchen", "bedroom", "bathroom", "dining", "hallway",
    "entrance", "garage", "office", "laundry", "outdoor",
]

EQUIPMENT_CATEGORIES = ["mobility", "bathroom", "bedroom", "assistive_tech", "iot"]

# Extra analysis focus appended to video prompts, per assessment type
VIDEO_FOCUS: dict[str, str] = {
    "falls_risk": (
        "gait pattern, balance, transfer technique, fall risk factors, "
        "mobility aids usage, and any safety concerns."
    ),
    "movement_mobility": (
        "functional mobility, transfer independence, gait biomechanics, speed, "
        "step length, symmetry, and mobility aid effectiveness."
    ),
    "mobility_scooter": (
        "scooter operation skills, steering control, obstacle navigation, "
        "transfer ability, and safety awareness."
    ),
}

_SYSTEM_PROMPTS: dict[EnrichmentKind, str] = {
    EnrichmentKind.RESPONSE_ANALYSIS: (
        "You are an expert Occupational Therapist conducting home environmental "
        "assessments. Provide detailed, actionable feedback to guide the assessment process."
    ),
    EnrichmentKind.ASSESSMENT_SUMMARY: (
        "You are an expert Occupational Therapist assistant specializing in client "
        "assessments and care planning."
    ),
    EnrichmentKind.EQUIPMENT_RECOMMENDATIONS: (
        "You are an equipment specialist for OT/AH assessments. Recommend appropriate "
        "assistive equipment based on client needs."
    ),
    EnrichmentKind.QUOTE_GENERATION: (
        "You are a pricing specialist. Generate 3 quote options (Essential, Recommended, "
        "Premium) with appropriate equipment selections."
    ),
    EnrichmentKind.CATALOG_PARSING: (
        "You extract structured product data from supplier catalogs. Never invent items "
        "or prices that are not in the text."
    ),
    EnrichmentKind.EQUIPMENT_JUSTIFICATION: (
        "You are an Occupational Therapist writing equipment funding justifications."
    ),
}


@dataclass(frozen=True)
class Route:
    """Which provider and model serve a kind, and with what sampling."""

    provider: str
    model: str
    temperature: float
    max_tokens: int
    # Model name reported to callers, when it differs from the request model
    label: str | None = None

    @property
    def reported_model(self) -> str:
        return self.label or self.model


ROUTES: dict[EnrichmentKind, Route] = {
    EnrichmentKind.RESPONSE_ANALYSIS: Route("openai", RESPONSE_ANALYSIS_MODEL, 0.7, 500),
    EnrichmentKind.ASSESSMENT_SUMMARY: Route("openai", SUMMARY_MODEL, 1.0, 1000),
    EnrichmentKind.EQUIPMENT_RECOMMENDATIONS: Route("grok", RECOMMENDATION_MODEL, 0.8, 1500),
    EnrichmentKind.QUOTE_GENERATION: Route("grok", RECOMMENDATION_MODEL, 0.7, 2000),
    EnrichmentKind.VISION_ANALYSIS: Route("gemini", VISION_MODEL, 0.7, 4096),
    EnrichmentKind.VIDEO_FRAME: Route("gemini", FRAME_MODEL, 0.3, 512),
    EnrichmentKind.ROOM_MAP: Route("gemini", FRAME_MODEL, 0.3, 512, label=MAP_VISION_MODEL),
    EnrichmentKind.VIDEO_ANALYSIS: Route("gemini", VIDEO_MODEL, 0.7, 8192),
    EnrichmentKind.SUPPORT_CHAT: Route("openai", SUPPORT_CHAT_MODEL, 0.7, 500),
    EnrichmentKind.CATALOG_PARSING: Route("openai", CATALOG_MODEL, 0.2, 4000),
    EnrichmentKind.EQUIPMENT_JUSTIFICATION: Route("grok", JUSTIFICATION_MODEL, 0.7, 800),
}

CONTEXT_TYPES: dict[EnrichmentKind, type[BaseModel]] = {
    EnrichmentKind.RESPONSE_ANALYSIS: ResponseAnalysisContext,
    EnrichmentKind.ASSESSMENT_SUMMARY: AssessmentSummaryContext,
    EnrichmentKind.EQUIPMENT_RECOMMENDATIONS: EquipmentRecommendationContext,
    EnrichmentKind.QUOTE_GENERATION: QuoteGenerationContext,
    EnrichmentKind.VISION_ANALYSIS: VisionAnalysisContext,
    EnrichmentKind.VIDEO_FRAME: VideoFrameContext,
    EnrichmentKind.ROOM_MAP: RoomMapContext,
    EnrichmentKind.VIDEO_ANALYSIS: VideoAnalysisContext,
    EnrichmentKind.SUPPORT_CHAT: SupportChatContext,
    EnrichmentKind.CATALOG_PARSING: CatalogParsingContext,
    EnrichmentKind.EQUIPMENT_JUSTIFICATION: EquipmentJustificationContext,
}

_Handler = Callable[[ModelProvider, Route, Any], Awaitable[Any]]


class EnrichmentGateway:
    """Dispatches enrichment kinds to providers.

    Args:
        providers: configured provider clients; kinds whose provider is
            absent fail softly with "not configured".
        prompts: optional ``PromptManager`` override (tests).
    """

    def __init__(
        self,
        providers: ProviderSet | None = None,
        prompts: PromptManager | None = None,
    ) -> None:
        self._providers = providers or ProviderSet()
        self._prompts = prompts or PromptManager()
        self._handlers: dict[EnrichmentKind, _Handler] = {
            EnrichmentKind.RESPONSE_ANALYSIS: partial(self._templated_text, EnrichmentKind.RESPONSE_ANALYSIS),
            EnrichmentKind.ASSESSMENT_SUMMARY: partial(self._templated_text, EnrichmentKind.ASSESSMENT_SUMMARY),
            EnrichmentKind.EQUIPMENT_RECOMMENDATIONS: partial(
                self._templated_text, EnrichmentKind.EQUIPMENT_RECOMMENDATIONS,
            ),
            EnrichmentKind.QUOTE_GENERATION: self._quote_generation,
            EnrichmentKind.VISION_ANALYSIS: self._vision_analysis,
            EnrichmentKind.VIDEO_FRAME: self._video_frame,
            EnrichmentKind.ROOM_MAP: self._room_map,
            EnrichmentKind.VIDEO_ANALYSIS: self._video_analysis,
            EnrichmentKind.SUPPORT_CHAT: self._support_chat,
            EnrichmentKind.CATALOG_PARSING: self._catalog_parsing,
            EnrichmentKind.EQUIPMENT_JUSTIFICATION: partial(
                self._templated_text, EnrichmentKind.EQUIPMENT_JUSTIFICATION,
            ),
        }

    def is_configured(self, kind: EnrichmentKind) -> bool:
        return self._providers.get(ROUTES[kind].provider) is not None

    async def enrich(self, kind: EnrichmentKind | str, context: BaseModel | dict) -> EnrichmentResult:
        """Run one enrichment.

        ``context`` must be (or validate as) the kind's context model; a
        mismatch there is a programming error and raises ``ValidationError``.
        """
        kind = EnrichmentKind(kind)
        ctx = CONTEXT_TYPES[kind].model_validate(context)
        route = ROUTES[kind]

        provider = self._providers.get(route.provider)
        if provider is None:
            logger.info("Enrichment %s skipped: %s provider is not configured", kind.value, route.provider)
            return EnrichmentResult(
                success=False,
                error=f"{route.provider} provider is not configured",
                model=route.reported_model,
            )

        try:
            result = await self._handlers[kind](provider, route, ctx)
        except _SOFT_FAILURES as exc:
            details = getattr(exc, "details", None) or str(exc)
            logger.warning("Enrichment %s failed via %s: %s", kind.value, route.provider, details)
            return EnrichmentResult(
                success=False,
                error=f"{kind.value} failed",
                details=details,
                model=route.reported_model,
            )
        return EnrichmentResult(success=True, result=result, model=route.reported_model)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _call(
        self,
        provider: ModelProvider,
        route: Route,
        prompt: str,
        *,
        system: str | None = None,
        **kwargs: Any,
    ) -> str:
        request = CompletionRequest(
            model=route.model,
            prompt=prompt,
            system=system,
            temperature=route.temperature,
            max_tokens=route.max_tokens,
            **kwargs,
        )
        return await provider.complete(request)

    async def _templated_text(
        self, kind: EnrichmentKind, provider: ModelProvider, route: Route, ctx: BaseModel,
    ) -> str:
        prompt = self._prompts.render_prompt(kind, ctx=ctx)
        return await self._call(provider, route, prompt, system=_SYSTEM_PROMPTS.get(kind))

    async def _quote_generation(
        self, provider: ModelProvider, route: Route, ctx: QuoteGenerationContext,
    ) -> QuoteOptions:
        prompt = self._prompts.render_prompt(
            EnrichmentKind.QUOTE_GENERATION, ctx=ctx, tax_percent=int(TAX_RATE * 100),
        )
        text = await self._call(
            provider, route, prompt, system=_SYSTEM_PROMPTS[EnrichmentKind.QUOTE_GENERATION],
        )
        return parse_structured(text, QuoteOptions)

    async def _vision_analysis(
        self, provider: ModelProvider, route: Route, ctx: VisionAnalysisContext,
    ) -> str:
        media = (InlineMedia(ctx.mime_type, ctx.image_base64),)
        return await self._call(provider, route, ctx.prompt, media=media)

    async def _video_frame(
        self, provider: ModelProvider, route: Route, ctx: VideoFrameContext,
    ) -> FrameAnalysis:
        prompt = self._prompts.render_prompt(EnrichmentKind.VIDEO_FRAME, room_types=ROOM_TYPES)
        text = await self._call(
            provider, route, prompt, media=(InlineMedia(ctx.mime_type, ctx.frame_base64),),
        )
        return parse_structured(text, FrameAnalysis)

    async def _room_map(
        self, provider: ModelProvider, route: Route, ctx: RoomMapContext,
    ) -> list[FrameAnalysis]:
        """Classify up to ``MAX_MAP_FRAMES`` frames; keep confident readings.

        Individual frames may fail without failing the batch.  Fails only
        when no frame produced a confident reading.
        """
        prompt = self._prompts.render_prompt(EnrichmentKind.ROOM_MAP, room_types=ROOM_TYPES)
        readings: list[FrameAnalysis] = []
        for index, frame in enumerate(ctx.frames[:MAX_MAP_FRAMES]):
            try:
                text = await self._call(
                    provider, route, prompt, media=(InlineMedia(ctx.mime_type, frame),),
                )
                reading = parse_structured(text, FrameAnalysis)
            except _SOFT_FAILURES as exc:
                logger.warning("Room map frame %d skipped: %s", index, exc)
                continue
            if reading.confidence > MIN_ROOM_CONFIDENCE:
                readings.append(reading)
        if not readings:
            raise StructuredOutputError("No frame produced a confident room reading")
        return readings

    async def _video_analysis(
        self, provider: ModelProvider, route: Route, ctx: VideoAnalysisContext,
    ) -> str:
        prompt = self._prompts.render_prompt(
            EnrichmentKind.VIDEO_ANALYSIS,
            ctx=ctx,
            focus=VIDEO_FOCUS.get(ctx.assessment_type or ""),
        )
        media = (InlineMedia(ctx.mime_type, ctx.video_base64),)
        return await self._call(provider, route, prompt, media=media)

    async def _support_chat(
        self, provider: ModelProvider, route: Route, ctx: SupportChatContext,
    ) -> str:
        history = tuple(
            m for m in ctx.history[-CHAT_HISTORY_TURNS:] if m.role in ("user", "assistant")
        )
        system = self._prompts.render_system(EnrichmentKind.SUPPORT_CHAT)
        return await self._call(provider, route, ctx.message, system=system, history=history)

    async def _catalog_parsing(
        self, provider: ModelProvider, route: Route, ctx: CatalogParsingContext,
    ) -> CatalogExtraction:
        prompt = self._prompts.render_prompt(
            EnrichmentKind.CATALOG_PARSING, ctx=ctx, categories=EQUIPMENT_CATEGORIES,
        )
        text = await self._call(
            provider, route, prompt, system=_SYSTEM_PROMPTS[EnrichmentKind.CATALOG_PARSING],
        )
        return parse_structured(text, CatalogExtraction)
