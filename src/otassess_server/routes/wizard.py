"""Wizard endpoints: section-by-section walk through an assessment.

The server keeps no wizard state: the caller sends its position with
every request and gets back the step to show.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.models import AnalysisResult, WizardComplete, WizardPosition, WizardStep
from otassess_core.models.wizard import WizardMoveRequest, WizardNextRequest
from otassess_core.wizard import AssessmentWizard

from otassess_server.dependencies import get_db, get_request_context, get_wizard

router = APIRouter(prefix="/assessments/{assessment_id}/wizard", tags=["wizard"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
async def enter_step(
    assessment_id: uuid.UUID,
    section_index: int = Query(0, ge=0),
    question_index: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    wizard: AssessmentWizard = Depends(get_wizard),
) -> WizardStep:
    """Step at the given position, with the saved, pre-filled or blank draft.

    Returns 400 when the position is outside the bank.
    """
    position = WizardPosition(section_index=section_index, question_index=question_index)
    return await wizard.enter(db, ctx, assessment_id, position)


@router.post("/next")
async def next_step(
    assessment_id: uuid.UUID,
    body: WizardNextRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    wizard: AssessmentWizard = Depends(get_wizard),
) -> WizardStep | WizardComplete:
    """Validate and save the current answer, then advance.

    Returns 400 (with ``field``) when a required answer is missing.
    After the last question the body is a ``kind: complete`` signal.
    """
    return await wizard.next(db, ctx, assessment_id, body)


@router.post("/previous")
async def previous_step(
    assessment_id: uuid.UUID,
    body: WizardMoveRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    wizard: AssessmentWizard = Depends(get_wizard),
) -> WizardStep:
    """Step back without saving or validating anything."""
    return await wizard.previous(db, ctx, assessment_id, body.position)


@router.post("/ai-feedback")
async def ai_feedback(
    assessment_id: uuid.UUID,
    body: WizardMoveRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    wizard: AssessmentWizard = Depends(get_wizard),
) -> AnalysisResult:
    """AI analysis of the saved answer at this position.

    Returns 400 when nothing has been saved for the question yet.
    """
    return await wizard.request_ai_feedback(db, ctx, assessment_id, body.position)
