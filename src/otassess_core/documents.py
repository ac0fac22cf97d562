"""DocumentService: practitioner business documents with expiry dates."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.document import BusinessDocument
from otassess_db.repositories import DocumentRepository

from otassess_core.context import RequestContext
from otassess_core.errors import NotFoundError
from otassess_core.models.document import DocumentCreate, DocumentUpdate


class DocumentService:
    def __init__(self) -> None:
        self._repo = DocumentRepository()

    async def create(
        self, db: AsyncSession, ctx: RequestContext, data: DocumentCreate,
    ) -> BusinessDocument:
        return await self._repo.create(db, user_id=ctx.user_id, **data.model_dump())

    async def list(self, db: AsyncSession, ctx: RequestContext) -> list[BusinessDocument]:
        return await self._repo.list_by_user(db, ctx.user_id)

    async def get(
        self, db: AsyncSession, ctx: RequestContext, document_id: uuid.UUID,
    ) -> BusinessDocument:
        doc = await self._repo.get_for_user(db, ctx.user_id, document_id)
        if doc is None:
            raise NotFoundError("Document", document_id)
        return doc

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        document_id: uuid.UUID,
        data: DocumentUpdate,
    ) -> BusinessDocument:
        doc = await self.get(db, ctx, document_id)
        fields = data.model_dump(exclude_unset=True)
        return await self._repo.update(db, doc, fields) if fields else doc

    async def delete(self, db: AsyncSession, ctx: RequestContext, document_id: uuid.UUID) -> None:
        doc = await self.get(db, ctx, document_id)
        await self._repo.delete(db, doc)
