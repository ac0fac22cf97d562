"""IoTDeviceService: the shared smart-device library and placements on house maps.

The library is shared like the equipment catalog.  A placement pins a
library device onto a house map, optionally inside one of that map's
rooms or areas; ownership follows the map's assessment.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.iot import DevicePlacement, IoTDevice
from otassess_db.repositories import HouseMapRepository, IoTDeviceRepository

from otassess_core.context import RequestContext
from otassess_core.errors import NotFoundError
from otassess_core.models.iot import (
    IoTDeviceCreate,
    IoTDeviceUpdate,
    PlacementCreate,
    PlacementUpdate,
)

logger = logging.getLogger(__name__)


class IoTDeviceService:
    def __init__(self) -> None:
        self._repo = IoTDeviceRepository()
        self._maps = HouseMapRepository()

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    async def list_devices(
        self, db: AsyncSession, *, category: str | None = None,
    ) -> list[IoTDevice]:
        return await self._repo.list_devices(db, category=category)

    async def get_device(self, db: AsyncSession, device_id: uuid.UUID) -> IoTDevice:
        device = await self._repo.get_device(db, device_id)
        if device is None:
            raise NotFoundError("IoT device", device_id)
        return device

    async def create_device(self, db: AsyncSession, data: IoTDeviceCreate) -> IoTDevice:
        device = await self._repo.create_device(db, **data.model_dump())
        logger.info("Added IoT device %s (%s) to the library", device.id, data.name)
        return device

    async def update_device(
        self, db: AsyncSession, device_id: uuid.UUID, data: IoTDeviceUpdate,
    ) -> IoTDevice:
        device = await self.get_device(db, device_id)
        fields = data.model_dump(exclude_unset=True)
        return await self._repo.update_device(db, device, fields) if fields else device

    async def delete_device(self, db: AsyncSession, device_id: uuid.UUID) -> None:
        device = await self.get_device(db, device_id)
        await self._repo.delete_device(db, device)

    # ------------------------------------------------------------------
    # Placements
    # ------------------------------------------------------------------

    async def _check_location(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        house_map_id: uuid.UUID,
        fields: dict[str, Any],
    ) -> None:
        """A room or area given for a placement must belong to the same map."""
        room_id = fields.get("room_id")
        if room_id is not None:
            room = await self._maps.get_room_for_user(db, ctx.user_id, room_id)
            if room is None or room.house_map_id != house_map_id:
                raise NotFoundError("Room", room_id)
        area_id = fields.get("area_id")
        if area_id is not None:
            area = await self._maps.get_area_for_user(db, ctx.user_id, area_id)
            if area is None or area.house_map_id != house_map_id:
                raise NotFoundError("Area", area_id)

    async def list_placements(
        self, db: AsyncSession, ctx: RequestContext, house_map_id: uuid.UUID,
    ) -> list[DevicePlacement]:
        house_map = await self._maps.get_map_for_user(db, ctx.user_id, house_map_id)
        if house_map is None:
            raise NotFoundError("House map", house_map_id)
        return await self._maps.list_placements(db, house_map.id)

    async def add_placement(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        house_map_id: uuid.UUID,
        data: PlacementCreate,
    ) -> DevicePlacement:
        house_map = await self._maps.get_map_for_user(db, ctx.user_id, house_map_id)
        if house_map is None:
            raise NotFoundError("House map", house_map_id)
        await self.get_device(db, data.device_id)
        fields = data.model_dump()
        await self._check_location(db, ctx, house_map.id, fields)
        placement = await self._repo.create_placement(db, house_map_id=house_map.id, **fields)
        logger.info(
            "Placed device %s x%d on house map %s (%s)",
            data.device_id, data.quantity, house_map.id, ctx,
        )
        return placement

    async def _require_placement(
        self, db: AsyncSession, ctx: RequestContext, placement_id: uuid.UUID,
    ) -> DevicePlacement:
        placement = await self._repo.get_placement_for_user(db, ctx.user_id, placement_id)
        if placement is None:
            raise NotFoundError("Device placement", placement_id)
        return placement

    async def update_placement(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        placement_id: uuid.UUID,
        data: PlacementUpdate,
    ) -> DevicePlacement:
        placement = await self._require_placement(db, ctx, placement_id)
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return placement
        await self._check_location(db, ctx, placement.house_map_id, fields)
        return await self._repo.update_placement(db, placement, fields)

    async def delete_placement(
        self, db: AsyncSession, ctx: RequestContext, placement_id: uuid.UUID,
    ) -> None:
        placement = await self._require_placement(db, ctx, placement_id)
        await self._repo.delete_placement(db, placement)
