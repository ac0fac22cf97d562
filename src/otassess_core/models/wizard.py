"""Assessment wizard models.

The wizard is stateless on the server: the caller holds a
``WizardPosition`` and every call re-derives the step from the question
bank, saved responses and pre-fill.
"""

import uuid
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from otassess_db.models.enums import AssessmentStatus, MediaType

from otassess_core.models.client import AssessmentProgress
from otassess_core.models.question import Question


class WizardPosition(BaseModel):
    section_index: int = Field(default=0, ge=0)
    question_index: int = Field(default=0, ge=0)


class AnswerDraft(BaseModel):
    """The in-progress answer shown for a question.

    ``source`` says where it came from: the saved response, a pre-fill
    suggestion from another of the client's assessments, or nothing.
    A pre-filled draft is never persisted until the user saves it.
    """

    answer: Optional[str] = None
    notes: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    needs_follow_up: bool = False
    ai_analysis: Optional[str] = None
    source: Literal["saved", "prefill", "blank"] = "blank"
    response_id: Optional[uuid.UUID] = None
    prefill_question_id: Optional[str] = None
    prefill_assessment_id: Optional[uuid.UUID] = None


class SectionInfo(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    index: int
    question_count: int


class WizardStep(BaseModel):
    kind: Literal["step"] = "step"
    assessment_id: uuid.UUID
    position: WizardPosition
    section: SectionInfo
    question: Question
    draft: AnswerDraft
    progress: AssessmentProgress
    has_previous: bool
    has_next: bool
    is_last: bool


class WizardComplete(BaseModel):
    """Returned by ``next`` after the last question has been saved."""

    kind: Literal["complete"] = "complete"
    assessment_id: uuid.UUID
    status: AssessmentStatus
    progress: AssessmentProgress


class WizardNextRequest(BaseModel):
    position: WizardPosition
    # Checkbox answers may be sent as a list of option labels
    answer: Union[str, List[str], None] = None
    notes: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None
    needs_follow_up: bool = False


class WizardMoveRequest(BaseModel):
    position: WizardPosition
