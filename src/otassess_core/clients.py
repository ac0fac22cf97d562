"""ClientService: client records and their archive/retention lifecycle.

Archiving a client is a soft delete that cascades to every live
assessment of that client.  Restoring brings them all back.  A permanent
delete is only allowed once the client's retention date has passed; the
database cascades it to assessments and everything beneath them.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.client import Client
from otassess_db.repositories import AssessmentRepository, ClientRepository

from otassess_core.context import RequestContext
from otassess_core.errors import ForbiddenError
from otassess_core.models.client import (
    ArchivedClientView,
    ArchiveResult,
    ClientCreate,
    ClientUpdate,
)
from otassess_core.ownership import require_client
from otassess_core.retention import (
    assessment_retention_date,
    can_permanently_delete,
    client_retention_date,
    days_remaining,
)

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self) -> None:
        self._repo = ClientRepository()
        self._assessments = AssessmentRepository()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(self, db: AsyncSession, ctx: RequestContext, data: ClientCreate) -> Client:
        client = await self._repo.create(db, user_id=ctx.user_id, **data.model_dump())
        logger.info("Created client %s for %s", client.id, ctx)
        return client

    async def list(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Client]:
        return await self._repo.list_by_user(
            db, ctx.user_id, search=search, limit=limit, offset=offset,
        )

    async def get(self, db: AsyncSession, ctx: RequestContext, client_id: uuid.UUID) -> Client:
        return await require_client(self._repo, db, ctx, client_id)

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        client_id: uuid.UUID,
        data: ClientUpdate,
    ) -> Client:
        client = await require_client(self._repo, db, ctx, client_id)
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return client
        return await self._repo.update(db, client, fields)

    # ------------------------------------------------------------------
    # Archive lifecycle
    # ------------------------------------------------------------------

    async def archive(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        client_id: uuid.UUID,
        *,
        reason: str,
        now: datetime | None = None,
    ) -> ArchiveResult:
        """Archive the client and all of its live assessments."""
        now = now or datetime.now(timezone.utc)
        client = await require_client(self._repo, db, ctx, client_id)

        can_delete_after = client_retention_date(client.date_of_birth, now)
        await self._repo.archive(db, client, reason=reason, can_delete_after=can_delete_after)

        assessments = await self._assessments.list_for_client(db, client.id, archived=False)
        for assessment in assessments:
            await self._assessments.archive(
                db,
                assessment,
                reason=f"Client archived: {reason}",
                can_delete_after=assessment_retention_date(
                    assessment.status, assessment.completed_at, now, client.date_of_birth,
                ),
            )

        logger.info(
            "Archived client %s with %d assessments (%s)", client.id, len(assessments), ctx,
        )
        return ArchiveResult(
            message=(
                f"Client and {len(assessments)} associated assessments archived successfully"
            ),
            archived_count=len(assessments) + 1,
            can_delete_after=can_delete_after,
        )

    async def list_archived(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        *,
        search: str | None = None,
        now: datetime | None = None,
    ) -> list[ArchivedClientView]:
        now = now or datetime.now(timezone.utc)
        clients = await self._repo.list_archived(db, ctx.user_id, search=search)
        return [
            ArchivedClientView.model_validate(c).model_copy(
                update={
                    "can_permanently_delete": can_permanently_delete(
                        c.can_delete_after, now=now,
                    ),
                }
            )
            for c in clients
        ]

    async def restore(
        self, db: AsyncSession, ctx: RequestContext, client_id: uuid.UUID,
    ) -> Client:
        """Un-archive the client together with its archived assessments."""
        client = await require_client(self._repo, db, ctx, client_id, archived=True)
        await self._repo.restore(db, client)
        restored = await self._assessments.restore_for_client(db, client.id)
        logger.info("Restored client %s and %d assessments (%s)", client.id, restored, ctx)
        return client

    async def permanent_delete(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        client_id: uuid.UUID,
        *,
        now: datetime | None = None,
    ) -> None:
        """Delete an archived client for good.

        Raises:
            NotFoundError: no archived client with this id for the requester.
            ForbiddenError: the retention period has not passed yet.
        """
        now = now or datetime.now(timezone.utc)
        client = await require_client(self._repo, db, ctx, client_id, archived=True)
        if not can_permanently_delete(client.can_delete_after, now=now):
            remaining = (
                days_remaining(client.can_delete_after, now=now)
                if client.can_delete_after is not None else None
            )
            if remaining is None:
                raise ForbiddenError("This client has no retention date and cannot be deleted.")
            raise ForbiddenError(
                f"This client must be retained for {remaining} more days due to "
                "healthcare record retention requirements."
            )
        await self._repo.hard_delete(db, client)
        logger.info("Permanently deleted client %s (%s)", client_id, ctx)
