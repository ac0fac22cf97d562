"""EquipmentService: the shared equipment catalog and supplier catalog import."""

from __future__ import annotations

import logging
import uuid

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import EquipmentCategory
from otassess_db.models.equipment import EquipmentItem
from otassess_db.repositories import EquipmentRepository

from otassess_core.context import RequestContext
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.errors import AnswerValidationError, NotFoundError, UpstreamError
from otassess_core.media import SIGNATURES, MediaStorage
from otassess_core.models.ai import ParseCatalogRequest
from otassess_core.models.enrichment import (
    CatalogParsingContext,
    EnrichmentKind,
    ExtractedEquipment,
)
from otassess_core.models.equipment import (
    CatalogParseResult,
    EquipmentCreate,
    EquipmentUpdate,
    EquipmentView,
)

logger = logging.getLogger(__name__)


def _category(value: str) -> EquipmentCategory:
    try:
        return EquipmentCategory(value.strip().lower())
    except ValueError:
        return EquipmentCategory.ASSISTIVE_TECH


class EquipmentService:
    """Catalog CRUD plus AI-assisted import.

    Args:
        gateway: AI enrichment gateway used by ``parse_catalog``.
        storage: upload storage, for catalogs given as an uploaded text file.
    """

    def __init__(
        self,
        gateway: EnrichmentGateway | None = None,
        storage: MediaStorage | None = None,
    ) -> None:
        self._gateway = gateway or EnrichmentGateway()
        self._storage = storage
        self._repo = EquipmentRepository()

    async def create(self, db: AsyncSession, data: EquipmentCreate) -> EquipmentItem:
        return await self._repo.create(db, **data.model_dump())

    async def list(
        self,
        db: AsyncSession,
        *,
        category: EquipmentCategory | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[EquipmentItem]:
        return await self._repo.list(
            db, category=category.value if category else None, limit=limit, offset=offset,
        )

    async def get(self, db: AsyncSession, equipment_id: uuid.UUID) -> EquipmentItem:
        item = await self._repo.get(db, equipment_id)
        if item is None:
            raise NotFoundError("Equipment", equipment_id)
        return item

    async def update(
        self, db: AsyncSession, equipment_id: uuid.UUID, data: EquipmentUpdate,
    ) -> EquipmentItem:
        item = await self.get(db, equipment_id)
        fields = data.model_dump(exclude_unset=True)
        return await self._repo.update(db, item, fields) if fields else item

    async def delete(self, db: AsyncSession, equipment_id: uuid.UUID) -> None:
        item = await self.get(db, equipment_id)
        await self._repo.delete(db, item)

    # ------------------------------------------------------------------
    # Catalog import
    # ------------------------------------------------------------------

    async def _catalog_text(self, request: ParseCatalogRequest) -> str:
        if request.text and request.text.strip():
            return request.text
        if not request.file_url:
            raise AnswerValidationError("Either text or file_url is required", field="text")
        if self._storage is None:
            raise AnswerValidationError("File uploads are not configured", field="file_url")

        data = await self._storage.read(request.file_url)
        if SIGNATURES["application/pdf"](data):
            raise AnswerValidationError(
                "PDF catalogs must be converted to text before parsing", field="file_url",
            )
        text = data.decode("utf-8", errors="replace")
        if not text.strip():
            raise AnswerValidationError("Catalog file is empty", field="file_url")
        return text

    async def parse_catalog(
        self, db: AsyncSession, ctx: RequestContext, request: ParseCatalogRequest,
    ) -> CatalogParseResult:
        """Extract equipment from catalog text and add it to the catalog.

        Best-effort per item: an extracted item that fails validation is
        logged and counted in ``failed_count``; the rest are still created.

        Raises:
            AnswerValidationError: no usable catalog text.
            UpstreamError: the extraction call itself failed.
        """
        text = await self._catalog_text(request)
        filename = request.filename or (request.file_url or "").rsplit("/", 1)[-1] or None

        result = await self._gateway.enrich(
            EnrichmentKind.CATALOG_PARSING,
            CatalogParsingContext(text=text, filename=filename),
        )
        if not result.success:
            raise UpstreamError("Failed to parse catalog", details=result.details or result.error)

        raw_items = result.result.items
        created: list[EquipmentItem] = []
        for index, raw in enumerate(raw_items):
            try:
                extracted = ExtractedEquipment.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Catalog item %d skipped: %s", index, exc.errors()[0]["msg"])
                continue
            item = await self._repo.create(
                db,
                name=extracted.name,
                description=extracted.description,
                category=_category(extracted.category).value,
                price=extracted.price,
                brand=extracted.brand,
                model=extracted.model,
                government_approved=extracted.government_approved,
                source_catalog=filename,
            )
            created.append(item)

        logger.info(
            "Catalog %s: created %d of %d extracted items (%s)",
            filename or "<text>", len(created), len(raw_items), ctx,
        )
        return CatalogParseResult(
            equipment_count=len(created),
            created_count=len(created),
            attempted_count=len(raw_items),
            failed_count=len(raw_items) - len(created),
            model=result.model,
            equipment=[EquipmentView.model_validate(i) for i in created],
        )
