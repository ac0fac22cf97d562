"""Response models: the saved answer to one question of one assessment."""

import uuid
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import MediaType


class ResponsePayload(BaseModel):
    """Body of an upsert.  Keyed on (assessment, ``question_id``).

    ``answer`` is a plain string.  Checkbox answers are a JSON array of the
    selected option labels, or a list of labels that is encoded on save.
    """

    question_id: str = Field(min_length=1)
    section_id: str = Field(min_length=1)
    answer: Union[str, List[str], None] = None
    notes: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None
    needs_follow_up: bool = False


class ResponseView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    question_id: str
    section_id: str
    answer: Optional[str] = None
    notes: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    ai_analysis: Optional[str] = None
    needs_follow_up: bool = False
    created_at: datetime
    updated_at: datetime


class AnalysisResult(BaseModel):
    """Outcome of a per-response AI analysis.

    ``success`` is False when the provider failed; the response row is
    left untouched in that case.
    """

    success: bool
    analysis: Optional[str] = None
    model: Optional[str] = None
    error: Optional[str] = None
