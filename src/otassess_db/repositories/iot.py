"""Async repository for the IoT device library and device placements.

The library is shared; placements are owned through
placement -> house map -> assessment -> ``user_id``.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.house_map import HouseMap
from otassess_db.models.iot import DevicePlacement, IoTDevice


def _touch(row: Any, fields: dict[str, Any]) -> None:
    for key, value in fields.items():
        setattr(row, key, value)
    row.updated_at = datetime.now(timezone.utc)


class IoTDeviceRepository:
    """Async read/write operations on ``iot_devices`` and ``device_placements``."""

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    async def list_devices(
        self, db: AsyncSession, *, category: str | None = None,
    ) -> list[IoTDevice]:
        stmt = select(IoTDevice)
        if category:
            stmt = stmt.where(IoTDevice.category == category)
        result = await db.execute(stmt.order_by(IoTDevice.category, IoTDevice.name))
        return list(result.scalars().all())

    async def get_device(self, db: AsyncSession, device_id: uuid.UUID) -> IoTDevice | None:
        return await db.get(IoTDevice, device_id)

    async def create_device(self, db: AsyncSession, **fields: Any) -> IoTDevice:
        device = IoTDevice(**fields)
        db.add(device)
        await db.flush()
        return device

    async def update_device(
        self, db: AsyncSession, device: IoTDevice, fields: dict[str, Any],
    ) -> IoTDevice:
        _touch(device, fields)
        await db.flush()
        return device

    async def delete_device(self, db: AsyncSession, device: IoTDevice) -> None:
        await db.delete(device)
        await db.flush()

    # ------------------------------------------------------------------
    # Placements
    # ------------------------------------------------------------------

    async def get_placement_for_user(
        self, db: AsyncSession, user_id: str, placement_id: uuid.UUID,
    ) -> DevicePlacement | None:
        stmt = (
            select(DevicePlacement)
            .join(HouseMap, HouseMap.id == DevicePlacement.house_map_id)
            .join(Assessment, Assessment.id == HouseMap.assessment_id)
            .where(DevicePlacement.id == placement_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_placement(
        self, db: AsyncSession, *, house_map_id: uuid.UUID, **fields: Any,
    ) -> DevicePlacement:
        placement = DevicePlacement(house_map_id=house_map_id, **fields)
        db.add(placement)
        await db.flush()
        return placement

    async def update_placement(
        self, db: AsyncSession, placement: DevicePlacement, fields: dict[str, Any],
    ) -> DevicePlacement:
        _touch(placement, fields)
        await db.flush()
        return placement

    async def delete_placement(self, db: AsyncSession, placement: DevicePlacement) -> None:
        await db.delete(placement)
        await db.flush()
