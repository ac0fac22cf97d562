"""PrefillResolver: suggest a first-visit draft from a client's other assessments.

A question may list ``prefill_from``, an ordered list of question ids in
any bank.  When the current assessment has no saved response for the
question, the resolver looks at the same client's other, non-archived
assessments for a response to one of those ids.

Policy when several candidates match: the most recently updated response
wins; on an exact ``updated_at`` tie the id listed earlier in
``prefill_from`` wins.

The resolver only reads.  Its result seeds a draft; nothing is written
until the user saves.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import AssessmentResponse
from otassess_db.repositories import ResponseRepository

from otassess_core.models.question import Question

logger = logging.getLogger(__name__)


def pick_candidate(
    question: Question, candidates: list[AssessmentResponse],
) -> AssessmentResponse | None:
    """Apply the tie-break policy to responses already narrowed to ``prefill_from``."""
    priority = {qid: i for i, qid in enumerate(question.prefill_from)}
    usable = [c for c in candidates if c.question_id in priority]
    if not usable:
        return None
    return min(usable, key=lambda r: (-r.updated_at.timestamp(), priority[r.question_id]))


class PrefillResolver:
    def __init__(self) -> None:
        self._repo = ResponseRepository()

    async def resolve(
        self,
        db: AsyncSession,
        question: Question,
        client_id: uuid.UUID,
        exclude_assessment_id: uuid.UUID,
    ) -> AssessmentResponse | None:
        """Best prior response for ``question``, or ``None``.

        Callers must only invoke this when no response exists for the
        question in ``exclude_assessment_id``; the resolver never looks at
        (or overwrites) the current assessment.
        """
        if not question.prefill_from:
            return None
        candidates = await self._repo.list_for_client(
            db,
            client_id,
            exclude_assessment_id=exclude_assessment_id,
            question_ids=list(question.prefill_from),
        )
        match = pick_candidate(question, candidates)
        if match is not None:
            logger.debug(
                "Pre-fill for %s from %s in assessment %s",
                question.id, match.question_id, match.assessment_id,
            )
        return match
