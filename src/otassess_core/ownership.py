"""Ownership lookups shared by the services.

Every read or write re-verifies that the row belongs to the requesting
practitioner.  A row that exists but belongs to someone else is reported
exactly like a missing row.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.client import Client
from otassess_db.repositories import AssessmentRepository, ClientRepository

from otassess_core.context import RequestContext
from otassess_core.errors import NotFoundError


async def require_assessment(
    repo: AssessmentRepository,
    db: AsyncSession,
    ctx: RequestContext,
    assessment_id: uuid.UUID,
    *,
    archived: bool | None = False,
) -> Assessment:
    assessment = await repo.get_for_user(db, ctx.user_id, assessment_id, archived=archived)
    if assessment is None:
        raise NotFoundError("Assessment", assessment_id)
    return assessment


async def require_client(
    repo: ClientRepository,
    db: AsyncSession,
    ctx: RequestContext,
    client_id: uuid.UUID,
    *,
    archived: bool | None = False,
) -> Client:
    client = await repo.get_for_user(db, ctx.user_id, client_id, archived=archived)
    if client is None:
        raise NotFoundError("Client", client_id)
    return client
