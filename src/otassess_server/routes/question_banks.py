"""Question bank endpoints: the static banks that drive the wizard.

Read-only reference data loaded at startup; no authentication required.
"""

from fastapi import APIRouter, Depends

from otassess_core.models import QuestionBank
from otassess_core.question_bank import QuestionBankStore

from otassess_server.dependencies import get_store

router = APIRouter(prefix="/question-banks", tags=["question-banks"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
def list_question_banks(
    store: QuestionBankStore = Depends(get_store),
) -> list[dict]:
    """Summaries of every loaded bank."""
    return [
        {
            "id": bank.id,
            "title": bank.title,
            "assessment_types": bank.assessment_types,
            "section_count": len(bank.sections),
            "question_count": bank.question_count,
        }
        for bank in store.banks.values()
    ]


@router.get("/{assessment_type}")
def get_question_bank(
    assessment_type: str,
    store: QuestionBankStore = Depends(get_store),
) -> QuestionBank:
    """Full bank for an assessment type.  Raises 404 for an unknown type."""
    bank = store.get_bank(assessment_type)
    if bank is None:
        raise KeyError(assessment_type)
    return bank
