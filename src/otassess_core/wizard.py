"""AssessmentWizard: section-by-section walk through an assessment's bank.

Stateless wizard pattern: the caller holds a ``WizardPosition`` and each
call rebuilds the step from the question bank and the database.  Nothing
is cached between calls, so a wizard can be resumed at any position, on
any device.

Transitions:
    enter(position)     load the saved response, else a pre-fill
                        suggestion, else a blank draft
    next(position, d)   validate ``d`` (required gate), upsert it, move to
                        the next question or signal completion
    previous(position)  move back one question; no validation, no writes
    request_ai_feedback analyse the saved response at ``position``

Positions outside the bank are rejected with ``AnswerValidationError``.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment, AssessmentResponse
from otassess_db.models.enums import AssessmentType
from otassess_db.repositories import AssessmentRepository, ResponseRepository

from otassess_core.answers import normalize_answer, validate_draft
from otassess_core.context import RequestContext
from otassess_core.errors import AnswerValidationError
from otassess_core.models.question import Question, QuestionBank, Section
from otassess_core.models.response import AnalysisResult, ResponsePayload
from otassess_core.models.wizard import (
    AnswerDraft,
    SectionInfo,
    WizardComplete,
    WizardNextRequest,
    WizardPosition,
    WizardStep,
)
from otassess_core.ownership import require_assessment
from otassess_core.prefill import PrefillResolver
from otassess_core.question_bank import QuestionBankStore
from otassess_core.responses import ResponseStore

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Position arithmetic (pure)
# ------------------------------------------------------------------

def locate(bank: QuestionBank, position: WizardPosition) -> tuple[Section, Question]:
    """Section and question at ``position``; 400 when outside the bank."""
    sections = bank.sections
    if position.section_index >= len(sections):
        raise AnswerValidationError(
            f"Section index {position.section_index} is outside the question bank",
            field="section_index",
        )
    section = sections[position.section_index]
    if position.question_index >= len(section.questions):
        raise AnswerValidationError(
            f"Question index {position.question_index} is outside section '{section.id}'",
            field="question_index",
        )
    return section, section.questions[position.question_index]


def next_position(bank: QuestionBank, position: WizardPosition) -> WizardPosition | None:
    """The following question, skipping empty sections; None after the last."""
    s, q = position.section_index, position.question_index + 1
    while s < len(bank.sections):
        if q < len(bank.sections[s].questions):
            return WizardPosition(section_index=s, question_index=q)
        s, q = s + 1, 0
    return None


def previous_position(bank: QuestionBank, position: WizardPosition) -> WizardPosition | None:
    """The preceding question, skipping empty sections; None before the first."""
    s, q = position.section_index, position.question_index - 1
    while s >= 0:
        if q >= 0:
            return WizardPosition(section_index=s, question_index=q)
        s -= 1
        if s >= 0:
            q = len(bank.sections[s].questions) - 1
    return None


# ------------------------------------------------------------------
# AssessmentWizard
# ------------------------------------------------------------------

class AssessmentWizard:
    """Drives the "conduct assessment" flow over a ``ResponseStore``.

    Args:
        store: loaded question banks.
        responses: response store used for saving, progress and AI feedback.
    """

    def __init__(self, store: QuestionBankStore, responses: ResponseStore) -> None:
        self._store = store
        self._responses = responses
        self._prefill = PrefillResolver()
        self._assessments = AssessmentRepository()
        self._repo = ResponseRepository()

    # ==================================================================
    # Transitions
    # ==================================================================

    async def enter(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        position: WizardPosition,
    ) -> WizardStep:
        assessment, bank = await self._load(db, ctx, assessment_id)
        return await self._build_step(db, assessment, bank, position)

    async def next(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        request: WizardNextRequest,
    ) -> WizardStep | WizardComplete:
        """Save & Next.

        An invalid draft raises ``AnswerValidationError`` before anything is
        written, so the caller stays on the same question with its draft.
        """
        assessment, bank = await self._load(db, ctx, assessment_id)
        section, question = locate(bank, request.position)

        answer = validate_draft(question, request.answer)
        await self._responses.save(
            db,
            assessment,
            ResponsePayload(
                question_id=question.id,
                section_id=section.id,
                answer=answer,
                notes=request.notes,
                media_url=request.media_url,
                media_type=request.media_type,
                needs_follow_up=request.needs_follow_up,
            ),
        )

        following = next_position(bank, request.position)
        if following is None:
            progress = await self._responses.progress(db, assessment)
            logger.info(
                "Wizard reached the end of assessment %s (%s): %d/%d answered",
                assessment.id, ctx, progress.answered, progress.total,
            )
            return WizardComplete(
                assessment_id=assessment.id, status=assessment.status, progress=progress,
            )
        return await self._build_step(db, assessment, bank, following)

    async def previous(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        position: WizardPosition,
    ) -> WizardStep:
        """Step back one question.  At the first question the step is unchanged."""
        assessment, bank = await self._load(db, ctx, assessment_id)
        locate(bank, position)
        target = previous_position(bank, position) or position
        return await self._build_step(db, assessment, bank, target)

    async def request_ai_feedback(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        position: WizardPosition,
    ) -> AnalysisResult:
        """Analyse the saved response at ``position``.

        The question must have been saved first; a draft that only exists
        on the device cannot be analysed.
        """
        assessment, bank = await self._load(db, ctx, assessment_id)
        _, question = locate(bank, position)
        saved = await self._repo.get_by_question(db, assessment.id, question.id)
        if saved is None:
            raise AnswerValidationError(
                "Save your answer before requesting AI feedback", field="answer",
            )
        return await self._responses.analyze(db, assessment, saved)

    # ==================================================================
    # Internal helpers
    # ==================================================================

    async def _load(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> tuple[Assessment, QuestionBank]:
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        bank = self._store.get_bank(assessment.assessment_type)
        if bank is None:
            assessment_type = AssessmentType(assessment.assessment_type).value
            raise AnswerValidationError(
                f"No question bank for assessment type '{assessment_type}'",
            )
        return assessment, bank

    async def _build_step(
        self,
        db: AsyncSession,
        assessment: Assessment,
        bank: QuestionBank,
        position: WizardPosition,
    ) -> WizardStep:
        section, question = locate(bank, position)
        saved = await self._repo.get_by_question(db, assessment.id, question.id)
        if saved is not None:
            draft = _draft_from_saved(saved)
        else:
            draft = await self._draft_from_prefill(db, assessment, question)

        progress = await self._responses.progress(db, assessment)
        has_next = next_position(bank, position) is not None
        return WizardStep(
            assessment_id=assessment.id,
            position=position,
            section=SectionInfo(
                id=section.id,
                title=section.title,
                description=section.description,
                icon=section.icon,
                index=position.section_index,
                question_count=len(section.questions),
            ),
            question=question,
            draft=draft,
            progress=progress,
            has_previous=previous_position(bank, position) is not None,
            has_next=has_next,
            is_last=not has_next,
        )

    async def _draft_from_prefill(
        self, db: AsyncSession, assessment: Assessment, question: Question,
    ) -> AnswerDraft:
        match = await self._prefill.resolve(db, question, assessment.client_id, assessment.id)
        if match is None:
            return AnswerDraft()
        try:
            answer = normalize_answer(question, match.answer)
        except AnswerValidationError:
            # Source question has a different shape (e.g. text feeding a choice)
            logger.debug(
                "Pre-fill answer from %s does not fit %s; using notes only",
                match.question_id, question.id,
            )
            answer = None
        return AnswerDraft(
            answer=answer,
            notes=match.notes,
            media_url=match.media_url,
            media_type=match.media_type,
            source="prefill",
            prefill_question_id=match.question_id,
            prefill_assessment_id=match.assessment_id,
        )


def _draft_from_saved(saved: AssessmentResponse) -> AnswerDraft:
    return AnswerDraft(
        answer=saved.answer,
        notes=saved.notes,
        media_url=saved.media_url,
        media_type=saved.media_type,
        needs_follow_up=saved.needs_follow_up,
        ai_analysis=saved.ai_analysis,
        source="saved",
        response_id=saved.id,
    )
