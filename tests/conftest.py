from unittest.mock import AsyncMock

import pytest

from otassess_core.context import RequestContext
from otassess_core.question_bank import QuestionBankStore

from helpers.fakes import (
    FakeAssessmentRepository,
    FakeClientRepository,
    FakeData,
    FakeResponseRepository,
)


@pytest.fixture(scope="session")
def store():
    """Load the shipped question banks once for the entire test session."""
    s = QuestionBankStore()
    s.load()
    return s


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def ctx():
    return RequestContext(user_id="user1", session_id="tablet-1")


@pytest.fixture
def other_ctx():
    return RequestContext(user_id="user2")


@pytest.fixture
def data():
    return FakeData()


@pytest.fixture
def repos(data):
    return {
        "clients": FakeClientRepository(data),
        "assessments": FakeAssessmentRepository(data),
        "responses": FakeResponseRepository(data),
    }
