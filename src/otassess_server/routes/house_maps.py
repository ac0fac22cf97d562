"""House map endpoints: one map per assessment, with rooms, areas and device placements.

Ownership is checked through the parent assessment; a map, room or area
under someone else's assessment is reported as 404.  Maps are created by
``POST /api/ai/generate-3d-map``.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.house_maps import HouseMapService
from otassess_core.models import (
    AreaCreate,
    AreaUpdate,
    AreaView,
    HouseMapDetail,
    RoomCreate,
    RoomUpdate,
    RoomView,
)

from otassess_server.dependencies import get_db, get_house_map_service, get_request_context

router = APIRouter(tags=["house-maps"])


@router.get("/assessments/{assessment_id}/house-map")
async def get_house_map(
    assessment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> HouseMapDetail:
    """The assessment's map with its rooms and areas.  404 if none exists."""
    return await service.get_for_assessment(db, ctx, assessment_id)


@router.post("/house-maps/{house_map_id}/rooms", status_code=201)
async def add_room(
    house_map_id: uuid.UUID,
    body: RoomCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> RoomView:
    return RoomView.model_validate(await service.add_room(db, ctx, house_map_id, body))


@router.put("/rooms/{room_id}")
async def update_room(
    room_id: uuid.UUID,
    body: RoomUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> RoomView:
    return RoomView.model_validate(await service.update_room(db, ctx, room_id, body))


@router.delete("/rooms/{room_id}", status_code=204)
async def delete_room(
    room_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> None:
    await service.delete_room(db, ctx, room_id)


@router.post("/house-maps/{house_map_id}/areas", status_code=201)
async def add_area(
    house_map_id: uuid.UUID,
    body: AreaCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> AreaView:
    return AreaView.model_validate(await service.add_area(db, ctx, house_map_id, body))


@router.put("/areas/{area_id}")
async def update_area(
    area_id: uuid.UUID,
    body: AreaUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> AreaView:
    return AreaView.model_validate(await service.update_area(db, ctx, area_id, body))


@router.delete("/areas/{area_id}", status_code=204)
async def delete_area(
    area_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: HouseMapService = Depends(get_house_map_service),
) -> None:
    await service.delete_area(db, ctx, area_id)
