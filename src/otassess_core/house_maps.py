"""HouseMapService: one floor plan per assessment, built by hand or from video frames.

Generating a map always replaces the assessment's existing one.  Frames
are classified by the vision model; confident indoor readings become
rooms and outdoor readings become areas.  If no frame yields a confident
reading (or no vision provider is configured) a rule-based layout is
generated instead, so the endpoint always produces a map.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.house_map import Area, HouseMap, Room
from otassess_db.repositories import AssessmentRepository, HouseMapRepository

from otassess_core.constants import MAP_FALLBACK_MODEL
from otassess_core.context import RequestContext
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.enrichment.fallbacks import (
    FALLBACK_ROOM_AREA,
    ROOM_SPACING,
    fallback_room_layout,
)
from otassess_core.errors import NotFoundError
from otassess_core.models.ai import GenerateMapRequest
from otassess_core.models.enrichment import (
    Dimensions,
    EnrichmentKind,
    FrameAnalysis,
    RoomMapContext,
)
from otassess_core.models.house_map import (
    AreaCreate,
    AreaUpdate,
    AreaView,
    GeneratedHouseMap,
    HouseMapDetail,
    HouseMapView,
    PlacementView,
    RoomCreate,
    RoomUpdate,
    RoomView,
)
from otassess_core.ownership import require_assessment

logger = logging.getLogger(__name__)


def layout_from_readings(readings: list[FrameAnalysis]) -> tuple[list[dict], list[dict]]:
    """Turn frame readings into room and area rows.

    Readings of the same type and name collapse into one; rooms are laid
    out in a row ``ROOM_SPACING`` metres apart.
    """
    seen: set[str] = set()
    rooms: list[dict] = []
    areas: list[dict] = []
    for reading in readings:
        name = reading.room_name or reading.room_type.replace("_", " ").title()
        key = f"{reading.room_type}_{name}".lower()
        if key in seen:
            continue
        seen.add(key)
        dims = reading.estimated_dimensions or Dimensions()
        if reading.is_outdoor:
            areas.append({
                "name": name,
                "area_type": reading.room_type,
                "length": dims.length,
                "width": dims.width,
                "features": list(reading.features),
            })
            continue
        rooms.append({
            "name": name,
            "room_type": reading.room_type,
            "floor": 1,
            "length": dims.length,
            "width": dims.width,
            "height": dims.height,
            "position_3d": {"x": len(rooms) * ROOM_SPACING, "y": 0, "z": 0},
            "features": list(reading.features),
        })
    return rooms, areas


class HouseMapService:
    def __init__(self, gateway: EnrichmentGateway | None = None) -> None:
        self._gateway = gateway or EnrichmentGateway()
        self._repo = HouseMapRepository()
        self._assessments = AssessmentRepository()

    async def _detail(self, db: AsyncSession, house_map: HouseMap) -> HouseMapDetail:
        rooms = await self._repo.list_rooms(db, house_map.id)
        areas = await self._repo.list_areas(db, house_map.id)
        placements = await self._repo.list_placements(db, house_map.id)
        return HouseMapDetail(
            house_map=HouseMapView.model_validate(house_map),
            rooms=[RoomView.model_validate(r) for r in rooms],
            areas=[AreaView.model_validate(a) for a in areas],
            placements=[PlacementView.model_validate(p) for p in placements],
        )

    async def get_for_assessment(
        self, db: AsyncSession, ctx: RequestContext, assessment_id: uuid.UUID,
    ) -> HouseMapDetail:
        assessment = await require_assessment(self._assessments, db, ctx, assessment_id)
        house_map = await self._repo.get_for_assessment(db, assessment.id)
        if house_map is None:
            raise NotFoundError("House map", assessment_id)
        return await self._detail(db, house_map)

    async def _require_map(
        self, db: AsyncSession, ctx: RequestContext, house_map_id: uuid.UUID,
    ) -> HouseMap:
        house_map = await self._repo.get_map_for_user(db, ctx.user_id, house_map_id)
        if house_map is None:
            raise NotFoundError("House map", house_map_id)
        return house_map

    # ------------------------------------------------------------------
    # Manual editing
    # ------------------------------------------------------------------

    async def add_room(
        self, db: AsyncSession, ctx: RequestContext, house_map_id: uuid.UUID, data: RoomCreate,
    ) -> Room:
        house_map = await self._require_map(db, ctx, house_map_id)
        return await self._repo.add_room(db, house_map_id=house_map.id, **data.model_dump())

    async def update_room(
        self, db: AsyncSession, ctx: RequestContext, room_id: uuid.UUID, data: RoomUpdate,
    ) -> Room:
        room = await self._repo.get_room_for_user(db, ctx.user_id, room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
        fields = data.model_dump(exclude_unset=True)
        return await self._repo.update_row(db, room, fields) if fields else room

    async def delete_room(self, db: AsyncSession, ctx: RequestContext, room_id: uuid.UUID) -> None:
        room = await self._repo.get_room_for_user(db, ctx.user_id, room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
        await self._repo.delete_row(db, room)

    async def add_area(
        self, db: AsyncSession, ctx: RequestContext, house_map_id: uuid.UUID, data: AreaCreate,
    ) -> Area:
        house_map = await self._require_map(db, ctx, house_map_id)
        return await self._repo.add_area(db, house_map_id=house_map.id, **data.model_dump())

    async def update_area(
        self, db: AsyncSession, ctx: RequestContext, area_id: uuid.UUID, data: AreaUpdate,
    ) -> Area:
        area = await self._repo.get_area_for_user(db, ctx.user_id, area_id)
        if area is None:
            raise NotFoundError("Area", area_id)
        fields = data.model_dump(exclude_unset=True)
        return await self._repo.update_row(db, area, fields) if fields else area

    async def delete_area(self, db: AsyncSession, ctx: RequestContext, area_id: uuid.UUID) -> None:
        area = await self._repo.get_area_for_user(db, ctx.user_id, area_id)
        if area is None:
            raise NotFoundError("Area", area_id)
        await self._repo.delete_row(db, area)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_map(
        self, db: AsyncSession, ctx: RequestContext, request: GenerateMapRequest,
    ) -> GeneratedHouseMap:
        """Build a map from walkthrough frames, replacing any existing one."""
        assessment = await require_assessment(self._assessments, db, ctx, request.assessment_id)

        result = await self._gateway.enrich(
            EnrichmentKind.ROOM_MAP,
            RoomMapContext(frames=request.frames, mime_type=request.mime_type),
        )
        if result.success:
            rooms, areas = layout_from_readings(result.result)
            total_area = sum(r["length"] * r["width"] for r in rooms)
            model = result.model
        else:
            logger.warning(
                "Map for assessment %s uses the rule-based layout: %s",
                assessment.id, result.details or result.error,
            )
            rooms, areas = fallback_room_layout(len(request.frames)), []
            total_area = len(rooms) * FALLBACK_ROOM_AREA
            model = MAP_FALLBACK_MODEL

        house_map = await self._repo.replace(
            db,
            assessment_id=assessment.id,
            map_fields={
                "property_type": request.property_type,
                "total_area": round(total_area, 2),
                "floors": 1,
                "ai_generated": True,
            },
            rooms=rooms,
            areas=areas,
        )
        logger.info(
            "Generated house map %s for assessment %s: %d rooms, %d areas (%s)",
            house_map.id, assessment.id, len(rooms), len(areas), ctx,
        )
        detail = await self._detail(db, house_map)
        return GeneratedHouseMap(
            **detail.model_dump(), model=model, ai_analyzed=result.success,
        )
