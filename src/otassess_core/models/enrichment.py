"""AI enrichment models: kinds, per-kind contexts, structured outputs.

Every enrichment kind takes its own typed context model.  Kinds that expect
structured JSON from the model declare an output schema here; the gateway
validates the model's reply against it and treats any mismatch as a
failure.

Output schemas mirror the JSON the prompts ask for, so they accept the
camelCase keys models return (``roomType``, ``estimatedDimensions``) as
well as snake_case.
"""

from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EnrichmentKind(str, Enum):
    RESPONSE_ANALYSIS = "response_analysis"
    ASSESSMENT_SUMMARY = "assessment_summary"
    EQUIPMENT_RECOMMENDATIONS = "equipment_recommendations"
    QUOTE_GENERATION = "quote_generation"
    VISION_ANALYSIS = "vision_analysis"
    VIDEO_FRAME = "video_frame"
    ROOM_MAP = "room_map"
    VIDEO_ANALYSIS = "video_analysis"
    SUPPORT_CHAT = "support_chat"
    CATALOG_PARSING = "catalog_parsing"
    EQUIPMENT_JUSTIFICATION = "equipment_justification"


# ------------------------------------------------------------------
# Shared pieces
# ------------------------------------------------------------------

class CatalogEntry(BaseModel):
    """One equipment item as offered to the model."""

    name: str
    category: str
    price: float
    government_approved: bool = False


class ChatMessage(BaseModel):
    role: str
    content: str


# ------------------------------------------------------------------
# Contexts (one per kind)
# ------------------------------------------------------------------

class ResponseAnalysisContext(BaseModel):
    ai_prompt: str
    question: str
    answer: Optional[str] = None
    notes: Optional[str] = None
    has_media: bool = False


class AssessmentSummaryContext(BaseModel):
    client_name: str
    assessment_type: str
    location: Optional[str] = None
    notes: Optional[str] = None
    photo_count: int = 0
    video_count: int = 0
    audio_count: int = 0

    @property
    def media_count(self) -> int:
        return self.photo_count + self.video_count + self.audio_count


class EquipmentRecommendationContext(BaseModel):
    client_name: str
    assessment_type: str
    location: Optional[str] = None
    media_count: int = 0
    catalog: List[CatalogEntry] = Field(default_factory=list)


class QuoteGenerationContext(BaseModel):
    client_name: str
    assessment_type: str
    catalog: List[CatalogEntry] = Field(default_factory=list)


class VisionAnalysisContext(BaseModel):
    image_base64: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    mime_type: str = "image/jpeg"


class VideoFrameContext(BaseModel):
    frame_base64: str = Field(min_length=1)
    mime_type: str = "image/jpeg"


class RoomMapContext(BaseModel):
    frames: List[str] = Field(min_length=1)
    mime_type: str = "image/jpeg"


class VideoAnalysisContext(BaseModel):
    video_base64: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    mime_type: str = "video/mp4"
    assessment_type: Optional[str] = None


class SupportChatContext(BaseModel):
    message: str = Field(min_length=1)
    history: List[ChatMessage] = Field(default_factory=list)


class CatalogParsingContext(BaseModel):
    text: str = Field(min_length=1)
    filename: Optional[str] = None


class EquipmentJustificationContext(BaseModel):
    client_name: str
    assessment_type: str
    equipment_name: str
    category: str
    description: Optional[str] = None
    price: float
    # "question: answer" lines from the assessment, most relevant first
    findings: List[str] = Field(default_factory=list)


# ------------------------------------------------------------------
# Structured outputs
# ------------------------------------------------------------------

class _ModelJSON(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteLine(_ModelJSON):
    name: str
    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0)


class GeneratedQuote(_ModelJSON):
    name: str
    description: str = ""
    items: List[QuoteLine] = Field(min_length=1)
    subtotal: float
    tax: float
    total: float


class QuoteOptions(_ModelJSON):
    quotes: List[GeneratedQuote] = Field(min_length=1)


class Dimensions(_ModelJSON):
    length: float = 4.0
    width: float = 3.5
    height: float = 2.4


class FrameAnalysis(_ModelJSON):
    """What the vision model reports for a single walkthrough frame."""

    room_type: str = "living"
    room_name: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)
    features: List[str] = Field(default_factory=list)
    estimated_dimensions: Optional[Dimensions] = None
    safety_issues: List[str] = Field(default_factory=list)
    is_outdoor: bool = False
    reasoning: str = ""


class ExtractedEquipment(_ModelJSON):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = "assistive_tech"
    price: float = Field(ge=0)
    brand: Optional[str] = None
    model: Optional[str] = None
    government_approved: bool = False


class CatalogExtraction(_ModelJSON):
    # Items are validated one by one by the caller so that a single bad
    # row does not discard the whole catalog.
    items: List[dict[str, Any]] = Field(default_factory=list)


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------

class EnrichmentResult(BaseModel):
    """Outcome of one enrichment call.

    ``result`` is a string for free-text kinds and the kind's output model
    (or list of them) for structured kinds.  On failure ``error`` is a short
    description and ``details`` carries the upstream message, if any.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    result: Any = None
    error: Optional[str] = None
    details: Optional[str] = None
    model: Optional[str] = None


class FrameGuidance(BaseModel):
    guidance: str
    next_action: Literal["continue", "move_to_next"] = "continue"
    coverage_percent: int
    is_complete: bool = False


class VideoFrameResult(BaseModel):
    """Response body of ``POST /api/ai/analyze-video-frame``."""

    room_type: str
    room_name: str
    detected_room_type: Optional[str] = None
    confidence: int = 0
    dimensions: Dimensions
    features: List[str]
    coverage_percent: int
    guidance: str
    safety_issues: List[str] = Field(default_factory=list)
    is_complete: bool = False
    next_action: str = "continue"
