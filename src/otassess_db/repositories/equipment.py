"""Async repository for the shared equipment catalog."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.equipment import EquipmentItem


class EquipmentRepository:
    """Async read/write operations on ``equipment_items``."""

    async def create(self, db: AsyncSession, **fields: Any) -> EquipmentItem:
        item = EquipmentItem(**fields)
        db.add(item)
        await db.flush()
        return item

    async def get(self, db: AsyncSession, equipment_id: uuid.UUID) -> EquipmentItem | None:
        return await db.get(EquipmentItem, equipment_id)

    async def list(
        self,
        db: AsyncSession,
        *,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[EquipmentItem]:
        """List catalog items, newest first."""
        stmt = select(EquipmentItem)
        if category is not None:
            stmt = stmt.where(EquipmentItem.category == category)
        stmt = stmt.order_by(EquipmentItem.created_at.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def update(
        self, db: AsyncSession, item: EquipmentItem, fields: dict[str, Any],
    ) -> EquipmentItem:
        for key, value in fields.items():
            setattr(item, key, value)
        item.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return item

    async def delete(self, db: AsyncSession, item: EquipmentItem) -> None:
        await db.delete(item)
        await db.flush()
