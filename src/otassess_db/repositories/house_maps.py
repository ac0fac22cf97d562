"""Async repository for house maps and their rooms, areas and device placements."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment
from otassess_db.models.house_map import Area, HouseMap, Room
from otassess_db.models.iot import DevicePlacement


class HouseMapRepository:
    """Async read/write operations on ``house_maps``, ``rooms`` and ``areas``."""

    async def get_for_assessment(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> HouseMap | None:
        result = await db.execute(
            select(HouseMap).where(HouseMap.assessment_id == assessment_id)
        )
        return result.scalar_one_or_none()

    async def replace(
        self,
        db: AsyncSession,
        *,
        assessment_id: uuid.UUID,
        map_fields: dict[str, Any],
        rooms: list[dict[str, Any]],
        areas: list[dict[str, Any]],
    ) -> HouseMap:
        """Drop any existing map for the assessment and insert a new one.

        Rooms and areas of the old map go with it via ``ON DELETE CASCADE``.
        """
        await db.execute(delete(HouseMap).where(HouseMap.assessment_id == assessment_id))
        house_map = HouseMap(assessment_id=assessment_id, **map_fields)
        db.add(house_map)
        await db.flush()

        for room in rooms:
            db.add(Room(house_map_id=house_map.id, **room))
        for area in areas:
            db.add(Area(house_map_id=house_map.id, **area))
        await db.flush()
        return house_map

    async def list_rooms(self, db: AsyncSession, house_map_id: uuid.UUID) -> list[Room]:
        stmt = select(Room).where(Room.house_map_id == house_map_id).order_by(Room.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_areas(self, db: AsyncSession, house_map_id: uuid.UUID) -> list[Area]:
        stmt = select(Area).where(Area.house_map_id == house_map_id).order_by(Area.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, house_map: HouseMap) -> None:
        await db.delete(house_map)
        await db.flush()

    # ------------------------------------------------------------------
    # Ownership-scoped lookups (via the parent assessment)
    # ------------------------------------------------------------------

    async def get_map_for_user(
        self, db: AsyncSession, user_id: str, house_map_id: uuid.UUID,
    ) -> HouseMap | None:
        stmt = (
            select(HouseMap)
            .join(Assessment, Assessment.id == HouseMap.assessment_id)
            .where(HouseMap.id == house_map_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_room_for_user(
        self, db: AsyncSession, user_id: str, room_id: uuid.UUID,
    ) -> Room | None:
        stmt = (
            select(Room)
            .join(HouseMap, HouseMap.id == Room.house_map_id)
            .join(Assessment, Assessment.id == HouseMap.assessment_id)
            .where(Room.id == room_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_area_for_user(
        self, db: AsyncSession, user_id: str, area_id: uuid.UUID,
    ) -> Area | None:
        stmt = (
            select(Area)
            .join(HouseMap, HouseMap.id == Area.house_map_id)
            .join(Assessment, Assessment.id == HouseMap.assessment_id)
            .where(Area.id == area_id, Assessment.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_room(
        self, db: AsyncSession, *, house_map_id: uuid.UUID, **fields: Any,
    ) -> Room:
        room = Room(house_map_id=house_map_id, **fields)
        db.add(room)
        await db.flush()
        return room

    async def add_area(
        self, db: AsyncSession, *, house_map_id: uuid.UUID, **fields: Any,
    ) -> Area:
        area = Area(house_map_id=house_map_id, **fields)
        db.add(area)
        await db.flush()
        return area

    async def delete_row(self, db: AsyncSession, row: Room | Area) -> None:
        await db.delete(row)
        await db.flush()

    async def update_row(
        self, db: AsyncSession, row: Room | Area, fields: dict[str, Any],
    ) -> Room | Area:
        for key, value in fields.items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return row

    async def list_placements(
        self, db: AsyncSession, house_map_id: uuid.UUID,
    ) -> list[DevicePlacement]:
        stmt = (
            select(DevicePlacement)
            .where(DevicePlacement.house_map_id == house_map_id)
            .order_by(DevicePlacement.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
