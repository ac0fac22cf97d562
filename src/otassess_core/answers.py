"""Answer encoding and validation helpers.

Answers are persisted as a single string column.  Checkbox answers are a
JSON array of the selected option labels, sorted and de-duplicated so that
the same selection always encodes to the same string; an empty selection
is ``"[]"``, never ``null``.

``normalize_answer`` checks the *shape* of an answer against its question
(valid option, rating in range, ...).  ``validate_draft`` adds the
required-field gate used by the wizard's "Save & Next".
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from otassess_core.errors import AnswerValidationError
from otassess_core.models.question import (
    CheckboxQuestion,
    MultipleChoiceQuestion,
    Question,
    RatingQuestion,
    YesNoQuestion,
)

# What a caller may submit as an answer: a string, or a list of labels for
# checkbox questions.
RawAnswer = str | list[str] | None


# ------------------------------------------------------------------
# Checkbox encoding
# ------------------------------------------------------------------

def encode_checkbox(selected: Iterable[str]) -> str:
    return json.dumps(sorted(set(selected)), ensure_ascii=False)


def decode_checkbox(raw: str | None) -> set[str]:
    """Decode a stored checkbox answer.  ``None`` or blank is the empty set."""
    if raw is None or not raw.strip():
        return set()
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise AnswerValidationError(
            "Checkbox answer must be a JSON array of options", field="answer",
        ) from None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise AnswerValidationError(
            "Checkbox answer must be a JSON array of options", field="answer",
        )
    return set(value)


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def is_answered(question: Question, answer: str | None) -> bool:
    """True when ``answer`` counts as a selection for ``question``."""
    if isinstance(question, CheckboxQuestion):
        return bool(decode_checkbox(answer))
    return answer is not None and answer.strip() != ""


def normalize_answer(question: Question, raw: RawAnswer) -> str | None:
    """Check the answer's shape and return its stored string form.

    Raises ``AnswerValidationError`` when the value is not acceptable for
    the question type.  A blank answer is always acceptable here.
    """
    if isinstance(question, CheckboxQuestion):
        selected = set(raw) if isinstance(raw, list) else decode_checkbox(raw)
        unknown = selected - set(question.options)
        if unknown:
            raise AnswerValidationError(
                f"Unknown option(s) for {question.id}: {sorted(unknown)}", field="answer",
            )
        return encode_checkbox(selected)

    if isinstance(raw, list):
        raise AnswerValidationError(
            f"Question {question.id} takes a single value", field="answer",
        )
    if raw is None or not raw.strip():
        return raw

    if isinstance(question, YesNoQuestion):
        if raw not in question.choices:
            raise AnswerValidationError("Answer must be 'Yes' or 'No'", field="answer")
    elif isinstance(question, MultipleChoiceQuestion):
        if raw not in question.options:
            raise AnswerValidationError(
                f"Answer is not one of the options for {question.id}", field="answer",
            )
    elif isinstance(question, RatingQuestion):
        try:
            rating = int(raw)
        except ValueError:
            raise AnswerValidationError("Rating must be a whole number", field="answer") from None
        if not question.min_rating <= rating <= question.max_rating:
            raise AnswerValidationError(
                f"Rating must be between {question.min_rating} and {question.max_rating}",
                field="answer",
            )
        return str(rating)
    return raw


def validate_draft(question: Question, raw: RawAnswer) -> str | None:
    """Normalise ``raw`` and enforce ``question.required``.

    A required checkbox needs at least one selection; every other required
    type needs a non-blank value.
    """
    answer = normalize_answer(question, raw)
    if question.required and not is_answered(question, answer):
        if isinstance(question, CheckboxQuestion):
            message = "Select at least one option"
        else:
            message = "An answer is required for this question"
        raise AnswerValidationError(message, field="answer")
    return answer
