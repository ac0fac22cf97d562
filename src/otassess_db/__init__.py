"""otassess_db: PostgreSQL persistence layer for the OT/AH assessment backend.

This package provides the ORM models, the async engine factory, and one
repository per aggregate (clients, assessments, responses, billing, ...).
It is consumed by ``otassess_core`` services and the FastAPI server.
"""

from otassess_db.engine import dispose_engine, get_engine, get_session_factory
from otassess_db.models import Assessment, AssessmentResponse, Client
from otassess_db.models.enums import AssessmentStatus, AssessmentType

__all__ = [
    "Assessment",
    "AssessmentResponse",
    "AssessmentStatus",
    "AssessmentType",
    "Client",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
