"""Request and response bodies for the ``/api/ai`` endpoints.

One model per endpoint.  Fields that the endpoint cannot work without are
declared required and non-empty, so a missing value is rejected at the
boundary before any provider is called.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from otassess_core.models.enrichment import ChatMessage, GeneratedQuote, VideoFrameResult


class AssessmentRef(BaseModel):
    assessment_id: uuid.UUID


class EquipmentRecommendationsResponse(BaseModel):
    success: bool = True
    recommendations: str
    model: Optional[str] = None
    equipment_count: int


class GenerateQuotesResponse(BaseModel):
    success: bool = True
    quotes: List[GeneratedQuote]
    model: Optional[str] = None


class VisionAnalysisRequest(BaseModel):
    image_base64: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    mime_type: str = "image/jpeg"


class TextAnalysisResponse(BaseModel):
    success: bool = True
    analysis: str
    model: Optional[str] = None
    assessment_type: Optional[str] = None


class VideoFrameRequest(BaseModel):
    frame_base64: str = Field(min_length=1)
    mime_type: str = "image/jpeg"
    # Room name typed by the user, used instead of the detected type
    context: Optional[str] = None
    rooms_scanned: List[str] = Field(default_factory=list)
    areas_scanned: List[str] = Field(default_factory=list)


class VideoFrameResponse(BaseModel):
    success: bool = True
    analysis: VideoFrameResult
    model: str


class GenerateMapRequest(BaseModel):
    assessment_id: uuid.UUID
    frames: List[str] = Field(min_length=1)
    property_type: str = Field(default="single_family", max_length=30)
    mime_type: str = "image/jpeg"


class VideoAnalysisRequest(BaseModel):
    video_base64: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    mime_type: str = "video/mp4"
    assessment_type: Optional[str] = None


class SupportChatRequest(BaseModel):
    message: str = Field(min_length=1)
    conversation_history: List[ChatMessage] = Field(default_factory=list)


class SupportChatResponse(BaseModel):
    success: bool = True
    response: str
    model: Optional[str] = None


class ParseCatalogRequest(BaseModel):
    """Catalog text to extract equipment from.

    Either ``text`` (already extracted) or ``file_url`` pointing at a
    plain-text upload from ``POST /api/upload/document`` must be given.
    """

    file_url: Optional[str] = None
    filename: Optional[str] = None
    text: Optional[str] = None


class JustificationRequest(BaseModel):
    assessment_id: uuid.UUID
    equipment_id: uuid.UUID
    # When set, the justification is also saved onto this recommendation
    recommendation_id: Optional[uuid.UUID] = None


class JustificationResponse(BaseModel):
    success: bool = True
    justification: str
    model: Optional[str] = None
