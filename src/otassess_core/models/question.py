"""Question bank models.

A bank is an ordered list of sections, each an ordered list of questions.
Order drives the wizard, so both lists preserve YAML order.

Question types:
    - yes_no: a single "Yes"/"No" choice
    - text: free text
    - rating: an integer on a small scale (default 1-5)
    - multiple_choice: pick exactly one of ``options``
    - checkbox: pick any of ``options``; stored as a JSON array string

The discriminated ``Question`` union uses ``type`` as its discriminator.
``question_mapper`` maps type strings to their pydantic classes.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


# --- Base question type ---

class BaseQuestion(BaseModel):
    """Fields shared by all question types."""

    id: str
    question: str
    description: Optional[str] = None
    required: bool = False
    requires_media: bool = False
    # Instruction sent to the model when the practitioner asks for AI feedback
    ai_prompt: str = ""
    # Ordered candidate question ids (any bank) to seed a first-visit draft from
    prefill_from: List[str] = Field(default_factory=list)


class YesNoQuestion(BaseQuestion):
    type: Literal["yes_no"] = "yes_no"

    @property
    def choices(self) -> list[str]:
        return ["Yes", "No"]


class TextQuestion(BaseQuestion):
    type: Literal["text"] = "text"


class RatingQuestion(BaseQuestion):
    """Integer rating between ``min_rating`` and ``max_rating`` inclusive."""

    type: Literal["rating"] = "rating"
    min_rating: int = 1
    max_rating: int = 5

    @model_validator(mode="after")
    def _chk(self):
        if self.min_rating >= self.max_rating:
            raise ValueError("min_rating must be < max_rating")
        return self


class _ChoiceQuestion(BaseQuestion):
    options: List[str]

    @model_validator(mode="after")
    def _chk_options(self):
        if not self.options:
            raise ValueError(f"Question {self.id}: options must not be empty")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"Question {self.id}: duplicate options")
        return self


class MultipleChoiceQuestion(_ChoiceQuestion):
    type: Literal["multiple_choice"] = "multiple_choice"


class CheckboxQuestion(_ChoiceQuestion):
    type: Literal["checkbox"] = "checkbox"


Question = Annotated[
    Union[
        YesNoQuestion,
        TextQuestion,
        RatingQuestion,
        MultipleChoiceQuestion,
        CheckboxQuestion,
    ],
    Field(discriminator="type"),
]

question_mapper = {
    "yes_no": YesNoQuestion,
    "text": TextQuestion,
    "rating": RatingQuestion,
    "multiple_choice": MultipleChoiceQuestion,
    "checkbox": CheckboxQuestion,
}


# --- Containers ---

class Section(BaseModel):
    """An ordered group of questions shown together in the wizard."""

    id: str
    title: str
    description: str = ""
    icon: str = ""
    questions: List[Question]


class QuestionBank(BaseModel):
    """One YAML bank file.

    ``assessment_types`` lists every assessment type this bank drives.
    """

    id: str
    title: str
    assessment_types: List[str]
    sections: List[Section]

    @property
    def question_count(self) -> int:
        return sum(len(s.questions) for s in self.sections)
