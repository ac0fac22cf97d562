"""Async CRUD repository for business documents."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.document import BusinessDocument


class DocumentRepository:
    async def create(self, db: AsyncSession, *, user_id: str, **fields: Any) -> BusinessDocument:
        doc = BusinessDocument(user_id=user_id, **fields)
        db.add(doc)
        await db.flush()
        return doc

    async def get_for_user(
        self, db: AsyncSession, user_id: str, document_id: uuid.UUID,
    ) -> BusinessDocument | None:
        stmt = select(BusinessDocument).where(
            BusinessDocument.id == document_id, BusinessDocument.user_id == user_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[BusinessDocument]:
        stmt = (
            select(BusinessDocument)
            .where(BusinessDocument.user_id == user_id)
            .order_by(BusinessDocument.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def update(
        self, db: AsyncSession, doc: BusinessDocument, fields: dict[str, Any],
    ) -> BusinessDocument:
        for key, value in fields.items():
            setattr(doc, key, value)
        doc.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return doc

    async def delete(self, db: AsyncSession, doc: BusinessDocument) -> None:
        await db.delete(doc)
        await db.flush()

    async def referenced_file_urls(self, db: AsyncSession) -> set[str]:
        result = await db.execute(
            select(BusinessDocument.file_url)
            .where(BusinessDocument.file_url.is_not(None))
            .distinct()
        )
        return set(result.scalars().all())
