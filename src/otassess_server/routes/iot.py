"""IoT device library and device placement endpoints.

The library is shared like the equipment catalog.  Placements are
checked through the house map's assessment; someone else's map or
placement is reported as 404.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.iot import IoTDeviceService
from otassess_core.models import (
    IoTDeviceCreate,
    IoTDeviceUpdate,
    IoTDeviceView,
    PlacementCreate,
    PlacementUpdate,
    PlacementView,
)

from otassess_server.dependencies import get_db, get_iot_service, get_request_context

router = APIRouter(tags=["iot"])


@router.get("/iot-devices")
async def list_devices(
    category: str | None = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> list[IoTDeviceView]:
    return [IoTDeviceView.model_validate(d) for d in await service.list_devices(db, category=category)]


@router.post("/iot-devices", status_code=201)
async def create_device(
    body: IoTDeviceCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> IoTDeviceView:
    return IoTDeviceView.model_validate(await service.create_device(db, body))


@router.get("/iot-devices/{device_id}")
async def get_device(
    device_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> IoTDeviceView:
    return IoTDeviceView.model_validate(await service.get_device(db, device_id))


@router.put("/iot-devices/{device_id}")
async def update_device(
    device_id: uuid.UUID,
    body: IoTDeviceUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> IoTDeviceView:
    return IoTDeviceView.model_validate(await service.update_device(db, device_id, body))


@router.delete("/iot-devices/{device_id}", status_code=204)
async def delete_device(
    device_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> None:
    await service.delete_device(db, device_id)


@router.get("/house-maps/{house_map_id}/device-placements")
async def list_placements(
    house_map_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> list[PlacementView]:
    placements = await service.list_placements(db, ctx, house_map_id)
    return [PlacementView.model_validate(p) for p in placements]


@router.post("/house-maps/{house_map_id}/device-placements", status_code=201)
async def add_placement(
    house_map_id: uuid.UUID,
    body: PlacementCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> PlacementView:
    return PlacementView.model_validate(await service.add_placement(db, ctx, house_map_id, body))


@router.put("/device-placements/{placement_id}")
async def update_placement(
    placement_id: uuid.UUID,
    body: PlacementUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> PlacementView:
    return PlacementView.model_validate(
        await service.update_placement(db, ctx, placement_id, body)
    )


@router.delete("/device-placements/{placement_id}", status_code=204)
async def delete_placement(
    placement_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: IoTDeviceService = Depends(get_iot_service),
) -> None:
    await service.delete_placement(db, ctx, placement_id)
