"""Async repository for assessment responses.

``upsert`` is a single ``INSERT ... ON CONFLICT DO UPDATE`` against the
``uq_response_assessment_question`` constraint, so two concurrent saves for
the same question collapse into one row (last writer wins).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment, AssessmentResponse


class ResponseRepository:
    """Async read/write operations on ``assessment_responses``."""

    async def list_for_assessment(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> list[AssessmentResponse]:
        stmt = (
            select(AssessmentResponse)
            .where(AssessmentResponse.assessment_id == assessment_id)
            .order_by(AssessmentResponse.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_question(
        self, db: AsyncSession, assessment_id: uuid.UUID, question_id: str,
    ) -> AssessmentResponse | None:
        stmt = select(AssessmentResponse).where(
            AssessmentResponse.assessment_id == assessment_id,
            AssessmentResponse.question_id == question_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(
        self, db: AsyncSession, assessment_id: uuid.UUID, response_id: uuid.UUID,
    ) -> AssessmentResponse | None:
        stmt = select(AssessmentResponse).where(
            AssessmentResponse.id == response_id,
            AssessmentResponse.assessment_id == assessment_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        *,
        assessment_id: uuid.UUID,
        question_id: str,
        section_id: str,
        answer: str | None,
        notes: str | None = None,
        media_url: str | None = None,
        media_type: str | None = None,
        needs_follow_up: bool = False,
    ) -> AssessmentResponse:
        """Create or overwrite the response for (assessment_id, question_id).

        The row id and ``created_at`` survive an overwrite; ``updated_at``
        is refreshed.  ``ai_analysis`` is left untouched.
        """
        now = datetime.now(timezone.utc)
        values = {
            "section_id": section_id,
            "answer": answer,
            "notes": notes,
            "media_url": media_url,
            "media_type": media_type,
            "needs_follow_up": needs_follow_up,
        }
        stmt = (
            pg_insert(AssessmentResponse)
            .values(
                id=uuid.uuid4(),
                assessment_id=assessment_id,
                question_id=question_id,
                created_at=now,
                updated_at=now,
                **values,
            )
            .on_conflict_do_update(
                constraint="uq_response_assessment_question",
                set_={**values, "updated_at": now},
            )
            .returning(AssessmentResponse)
        )
        result = await db.scalars(
            stmt, execution_options={"populate_existing": True},
        )
        return result.one()

    async def set_ai_analysis(
        self, db: AsyncSession, response: AssessmentResponse, analysis: str,
    ) -> AssessmentResponse:
        response.ai_analysis = analysis
        response.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return response

    async def delete(self, db: AsyncSession, response: AssessmentResponse) -> None:
        await db.delete(response)
        await db.flush()

    async def answered_question_ids(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> set[str]:
        """Distinct question ids with a saved response."""
        stmt = (
            select(AssessmentResponse.question_id)
            .where(AssessmentResponse.assessment_id == assessment_id)
            .distinct()
        )
        result = await db.execute(stmt)
        return set(result.scalars().all())

    async def list_for_client(
        self,
        db: AsyncSession,
        client_id: uuid.UUID,
        *,
        exclude_assessment_id: uuid.UUID | None = None,
        question_ids: list[str] | None = None,
    ) -> list[AssessmentResponse]:
        """Responses across a client's live assessments, newest first.

        Used for pre-fill.  ``question_ids`` narrows to candidate sources.
        """
        stmt = (
            select(AssessmentResponse)
            .join(Assessment, Assessment.id == AssessmentResponse.assessment_id)
            .where(
                Assessment.client_id == client_id,
                Assessment.is_archived.is_(False),
            )
        )
        if exclude_assessment_id is not None:
            stmt = stmt.where(Assessment.id != exclude_assessment_id)
        if question_ids is not None:
            stmt = stmt.where(AssessmentResponse.question_id.in_(question_ids))
        result = await db.execute(stmt.order_by(AssessmentResponse.updated_at.desc()))
        return list(result.scalars().all())
