"""Response endpoints: one saved answer per (assessment, question).

``POST`` is an upsert keyed on ``question_id``: saving the same question
twice updates the existing row.  Every save re-derives the assessment's
status from its progress.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.models import AnalysisResult, ResponsePayload, ResponseView
from otassess_core.responses import ResponseStore

from otassess_server.dependencies import get_db, get_request_context, get_response_store

router = APIRouter(prefix="/assessments", tags=["responses"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/client/{client_id}/previous-responses")
async def list_previous_responses(
    client_id: uuid.UUID,
    exclude_assessment_id: uuid.UUID | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    responses: ResponseStore = Depends(get_response_store),
) -> list[ResponseView]:
    """Responses on the client's other live assessments, newest first."""
    rows = await responses.previous_responses(
        db, ctx, client_id, exclude_assessment_id=exclude_assessment_id,
    )
    return [ResponseView.model_validate(r) for r in rows]


@router.get("/{assessment_id}/responses")
async def list_responses(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    responses: ResponseStore = Depends(get_response_store),
) -> list[ResponseView]:
    rows = await responses.list_responses(db, ctx, assessment_id)
    return [ResponseView.model_validate(r) for r in rows]


@router.post("/{assessment_id}/responses")
async def upsert_response(
    assessment_id: uuid.UUID,
    body: ResponsePayload,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    responses: ResponseStore = Depends(get_response_store),
) -> ResponseView:
    """Create or update the response for ``body.question_id``.

    Returns 400 when the question is not in the assessment's bank or a
    checkbox answer names an unknown option.
    """
    row = await responses.upsert_response(db, ctx, assessment_id, body)
    return ResponseView.model_validate(row)


@router.delete("/{assessment_id}/responses/{response_id}", status_code=204)
async def delete_response(
    assessment_id: uuid.UUID,
    response_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    responses: ResponseStore = Depends(get_response_store),
) -> None:
    await responses.delete_response(db, ctx, assessment_id, response_id)


@router.post("/{assessment_id}/responses/{response_id}/analyze")
async def analyze_response(
    assessment_id: uuid.UUID,
    response_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    responses: ResponseStore = Depends(get_response_store),
) -> AnalysisResult:
    """Ask the model about one answer.

    The analysis is stored on the response only when the provider
    succeeds; otherwise ``success`` is false and the row is untouched.
    """
    return await responses.analyze_response(db, ctx, assessment_id, response_id)
