"""ResponseStore: persisted answers, one per (assessment, question).

Saving is an upsert on the ``(assessment_id, question_id)`` unique key, so
re-saving a question updates the same row (same ``id``) instead of adding
a second one.  After every write the assessment's status is re-derived
from what is saved:

    no answers                      -> draft
    some answers                    -> in_progress
    every bank question answered    -> completed (completed_at stamped)
    approved                        -> left alone

AI analysis of a single response is best-effort: a provider failure
returns ``AnalysisResult(success=False)`` and leaves the row untouched.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment, AssessmentResponse
from otassess_db.models.enums import AssessmentStatus, AssessmentType
from otassess_db.repositories import AssessmentRepository, ClientRepository, ResponseRepository

from otassess_core.answers import normalize_answer
from otassess_core.context import RequestContext
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.errors import AnswerValidationError, NotFoundError
from otassess_core.models.client import AssessmentProgress
from otassess_core.models.enrichment import EnrichmentKind, ResponseAnalysisContext
from otassess_core.models.question import Question
from otassess_core.models.response import AnalysisResult, ResponsePayload
from otassess_core.ownership import require_assessment, require_client
from otassess_core.question_bank import QuestionBankStore

logger = logging.getLogger(__name__)


def derive_status(
    current: AssessmentStatus | str, answered: int, total: int,
) -> AssessmentStatus:
    """Status implied by ``answered`` of ``total`` bank questions."""
    current = AssessmentStatus(current)
    if current == AssessmentStatus.APPROVED:
        return current
    if total > 0 and answered >= total:
        return AssessmentStatus.COMPLETED
    if answered > 0:
        return AssessmentStatus.IN_PROGRESS
    return AssessmentStatus.DRAFT


class ResponseStore:
    """Response CRUD scoped to the requesting practitioner.

    Args:
        store: loaded question banks; used to check that a question belongs
            to the assessment's bank and to count bank questions.
        gateway: AI enrichment gateway for per-response analysis.
    """

    def __init__(
        self,
        store: QuestionBankStore,
        gateway: EnrichmentGateway | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway or EnrichmentGateway()
        self._assessments = AssessmentRepository()
        self._clients = ClientRepository()
        self._responses = ResponseRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_responses(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> list[AssessmentResponse]:
        await require_assessment(self._assessments, db, ctx, assessment_id)
        return await self._responses.list_for_assessment(db, assessment_id)

    async def get_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        question_id: str,
    ) -> AssessmentResponse | None:
        await require_assessment(self._assessments, db, ctx, assessment_id)
        return await self._responses.get_by_question(db, assessment_id, question_id)

    async def previous_responses(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        client_id: uuid.UUID,
        *,
        exclude_assessment_id: uuid.UUID | None = None,
    ) -> list[AssessmentResponse]:
        """All responses on the client's other live assessments, newest first."""
        await require_client(self._clients, db, ctx, client_id)
        return await self._responses.list_for_client(
            db, client_id, exclude_assessment_id=exclude_assessment_id,
        )

    async def progress(self, db: AsyncSession, assessment: Assessment) -> AssessmentProgress:
        """Distinct answered bank questions over the bank's question count."""
        bank_ids = {q.id for q in self._store.get_all_questions(assessment.assessment_type)}
        answered = await self._responses.answered_question_ids(db, assessment.id)
        return AssessmentProgress(answered=len(answered & bank_ids), total=len(bank_ids))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def resolve_question(self, assessment: Assessment, question_id: str) -> Question:
        """The bank question for ``question_id``; 400 if it is not in this assessment's bank."""
        question = self._store.get_question_by_id(question_id)
        if question is None or not self._store.bank_contains(
            assessment.assessment_type, question_id,
        ):
            raise AnswerValidationError(
                f"Question '{question_id}' is not part of the "
                f"{AssessmentType(assessment.assessment_type).value} assessment",
                field="question_id",
            )
        return question

    async def upsert_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        payload: ResponsePayload,
    ) -> AssessmentResponse:
        """Create or overwrite the response for ``payload.question_id``.

        Only the answer's shape is checked here; the required-field gate
        belongs to the wizard, so a partial save from elsewhere is allowed.
        """
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        return await self.save(db, assessment, payload)

    async def save(
        self, db: AsyncSession, assessment: Assessment, payload: ResponsePayload,
    ) -> AssessmentResponse:
        """Upsert for an assessment whose ownership is already verified."""
        question = self.resolve_question(assessment, payload.question_id)
        section = self._store.get_section_for_question(question.id)
        if section is not None and payload.section_id != section.id:
            raise AnswerValidationError(
                f"Question '{question.id}' belongs to section '{section.id}', "
                f"not '{payload.section_id}'",
                field="section_id",
            )

        answer = normalize_answer(question, payload.answer)
        response = await self._responses.upsert(
            db,
            assessment_id=assessment.id,
            question_id=question.id,
            section_id=payload.section_id,
            answer=answer,
            notes=payload.notes,
            media_url=payload.media_url,
            media_type=payload.media_type.value if payload.media_type else None,
            needs_follow_up=payload.needs_follow_up,
        )
        await self.refresh_status(db, assessment)
        return response

    async def delete_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        response_id: uuid.UUID,
    ) -> None:
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        response = await self._responses.get_by_id(db, assessment_id, response_id)
        if response is None:
            raise NotFoundError("Response", response_id)
        await self._responses.delete(db, response)
        await self.refresh_status(db, assessment)

    async def refresh_status(
        self, db: AsyncSession, assessment: Assessment,
    ) -> AssessmentProgress:
        """Re-derive and store the assessment status from saved responses."""
        progress = await self.progress(db, assessment)
        status = derive_status(assessment.status, progress.answered, progress.total)
        if status != assessment.status:
            completed_at = (
                datetime.now(timezone.utc) if status == AssessmentStatus.COMPLETED else None
            )
            logger.info(
                "Assessment %s status %s -> %s (%d/%d answered)",
                assessment.id, AssessmentStatus(assessment.status).value, status.value,
                progress.answered, progress.total,
            )
            await self._assessments.set_status(db, assessment, status, completed_at=completed_at)
        return progress

    # ------------------------------------------------------------------
    # AI analysis
    # ------------------------------------------------------------------

    async def analyze_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        assessment_id: uuid.UUID,
        response_id: uuid.UUID,
    ) -> AnalysisResult:
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        response = await self._responses.get_by_id(db, assessment_id, response_id)
        if response is None:
            raise NotFoundError("Response", response_id)
        return await self.analyze(db, assessment, response)

    async def analyze(
        self, db: AsyncSession, assessment: Assessment, response: AssessmentResponse,
    ) -> AnalysisResult:
        """Ask the model about one saved response; persist the text on success."""
        question = self._store.get_question_by_id(response.question_id)
        if question is None:
            raise NotFoundError("Question", response.question_id)

        result = await self._gateway.enrich(
            EnrichmentKind.RESPONSE_ANALYSIS,
            ResponseAnalysisContext(
                ai_prompt=question.ai_prompt,
                question=question.question,
                answer=response.answer,
                notes=response.notes,
                has_media=bool(response.media_url),
            ),
        )
        if not result.success:
            logger.warning(
                "Analysis of response %s (assessment %s) failed: %s",
                response.id, assessment.id, result.details or result.error,
            )
            return AnalysisResult(
                success=False, model=result.model, error=result.details or result.error,
            )

        await self._responses.set_ai_analysis(db, response, result.result)
        return AnalysisResult(success=True, analysis=result.result, model=result.model)
