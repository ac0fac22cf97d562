"""Async CRUD repository for clients."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.client import Client


class ClientRepository:
    """Async read/write operations on the ``clients`` table.

    Every lookup is scoped by ``user_id``; a client belonging to someone else
    is indistinguishable from a missing one.
    """

    async def create(self, db: AsyncSession, *, user_id: str, **fields: Any) -> Client:
        client = Client(user_id=user_id, **fields)
        db.add(client)
        await db.flush()
        return client

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        client_id: uuid.UUID,
        *,
        archived: bool | None = False,
    ) -> Client | None:
        """Fetch a client owned by ``user_id``.

        ``archived`` filters on archival state; ``None`` accepts either.
        """
        stmt = select(Client).where(Client.id == client_id, Client.user_id == user_id)
        if archived is not None:
            stmt = stmt.where(Client.is_archived.is_(archived))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Client]:
        """List live clients, most recently created first."""
        stmt = select(Client).where(
            Client.user_id == user_id, Client.is_archived.is_(False),
        )
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Client.name.ilike(pattern), Client.address.ilike(pattern))
            )
        stmt = stmt.order_by(Client.created_at.desc()).limit(limit).offset(offset)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_archived(
        self, db: AsyncSession, user_id: str, *, search: str | None = None,
    ) -> list[Client]:
        stmt = select(Client).where(
            Client.user_id == user_id, Client.is_archived.is_(True),
        )
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Client.name.ilike(pattern),
                    Client.email.ilike(pattern),
                    Client.phone.ilike(pattern),
                )
            )
        result = await db.execute(stmt.order_by(Client.archived_at.desc()))
        return list(result.scalars().all())

    async def update(
        self, db: AsyncSession, client: Client, fields: dict[str, Any],
    ) -> Client:
        for key, value in fields.items():
            setattr(client, key, value)
        client.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return client

    async def archive(
        self,
        db: AsyncSession,
        client: Client,
        *,
        reason: str,
        can_delete_after: datetime,
    ) -> Client:
        now = datetime.now(timezone.utc)
        client.is_archived = True
        client.archived_at = now
        client.deletion_reason = reason
        client.can_delete_after = can_delete_after
        client.updated_at = now
        await db.flush()
        return client

    async def restore(self, db: AsyncSession, client: Client) -> Client:
        client.is_archived = False
        client.archived_at = None
        client.deletion_reason = None
        client.can_delete_after = None
        client.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return client

    async def hard_delete(self, db: AsyncSession, client: Client) -> None:
        """Remove the row; assessments and their children cascade in the DB."""
        await db.delete(client)
        await db.flush()

    async def purge_expired(self, db: AsyncSession, *, now: datetime) -> int:
        """Permanently delete archived clients whose retention has lapsed."""
        stmt = delete(Client).where(
            Client.is_archived.is_(True),
            Client.can_delete_after.is_not(None),
            Client.can_delete_after <= now,
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0
