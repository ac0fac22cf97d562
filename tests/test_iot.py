"""IoTDeviceService tests: the shared library and placements on house maps.

Maps, rooms and areas live in ``FakeData``; ownership follows the map's
assessment just as the real repository joins do.
"""

import pytest

from otassess_db.models.enums import PlacementPriority, PlacementStatus
from otassess_core.errors import NotFoundError
from otassess_core.iot import IoTDeviceService
from otassess_core.models.house_map import Position3D
from otassess_core.models.iot import (
    IoTDeviceCreate,
    IoTDeviceUpdate,
    PlacementCreate,
    PlacementUpdate,
)

from helpers.fakes import FakeHouseMapRepository, FakeIoTDeviceRepository


@pytest.fixture
def iot(data):
    svc = IoTDeviceService()
    svc._repo = FakeIoTDeviceRepository(data)
    svc._maps = FakeHouseMapRepository(data)
    return svc


@pytest.fixture
def house_map(data):
    return data.add_map(data.add_assessment(data.add_client()))


@pytest.fixture
def device(data):
    return data.add_device()


def placement_for(device, **kwargs):
    return PlacementCreate(device_id=device.id, position_3d=Position3D(x=1, y=0, z=2), **kwargs)


# =====================================================================
# Library
# =====================================================================


@pytest.mark.asyncio
async def test_library_crud(iot, db):
    created = await iot.create_device(
        db,
        IoTDeviceCreate(
            name="Smart smoke alarm", category="safety", device_type="smoke_alarm",
            price=89.0, approved_for=["ndis"],
        ),
    )
    assert created.technical_specs == {}

    updated = await iot.update_device(db, created.id, IoTDeviceUpdate(price=79.0))
    assert updated.price == 79.0
    assert updated.name == "Smart smoke alarm"

    await iot.delete_device(db, created.id)
    with pytest.raises(NotFoundError):
        await iot.get_device(db, created.id)


@pytest.mark.asyncio
async def test_library_filter_by_category(iot, db, data):
    data.add_device(name="Door sensor", category="security")
    data.add_device(name="Bed sensor", category="health")
    rows = await iot.list_devices(db, category="health")
    assert [r.name for r in rows] == ["Bed sensor"]


# =====================================================================
# Placements
# =====================================================================


@pytest.mark.asyncio
async def test_place_device_in_room(iot, db, ctx, data, house_map, device):
    room = data.add_room(house_map)
    placement = await iot.add_placement(
        db, ctx, house_map.id, placement_for(device, room_id=room.id, quantity=2),
    )
    assert placement.house_map_id == house_map.id
    assert placement.room_id == room.id
    assert placement.position_3d == {"x": 1.0, "y": 0.0, "z": 2.0}
    assert placement.priority == PlacementPriority.RECOMMENDED
    assert [p.id for p in await iot.list_placements(db, ctx, house_map.id)] == [placement.id]


@pytest.mark.asyncio
async def test_unknown_device_rejected(iot, db, ctx, data, house_map):
    ghost = data.add_device()
    del data.devices[ghost.id]
    with pytest.raises(NotFoundError, match="IoT device"):
        await iot.add_placement(db, ctx, house_map.id, placement_for(ghost))


@pytest.mark.asyncio
async def test_room_from_another_map_rejected(iot, db, ctx, data, house_map, device):
    other_map = data.add_map(data.add_assessment(data.add_client()))
    stray = data.add_room(other_map)
    with pytest.raises(NotFoundError, match="Room"):
        await iot.add_placement(db, ctx, house_map.id, placement_for(device, room_id=stray.id))


@pytest.mark.asyncio
async def test_area_must_belong_to_map(iot, db, ctx, data, house_map, device):
    other_map = data.add_map(data.add_assessment(data.add_client()))
    stray = data.add_area(other_map)
    with pytest.raises(NotFoundError, match="Area"):
        await iot.add_placement(db, ctx, house_map.id, placement_for(device, area_id=stray.id))


@pytest.mark.asyncio
async def test_other_practitioner_map_hidden(iot, db, other_ctx, house_map, device):
    with pytest.raises(NotFoundError, match="House map"):
        await iot.add_placement(db, other_ctx, house_map.id, placement_for(device))
    with pytest.raises(NotFoundError):
        await iot.list_placements(db, other_ctx, house_map.id)


@pytest.mark.asyncio
async def test_update_and_delete_placement(iot, db, ctx, other_ctx, data, house_map, device):
    placement = await iot.add_placement(db, ctx, house_map.id, placement_for(device))
    area = data.add_area(house_map)

    updated = await iot.update_placement(
        db, ctx, placement.id,
        PlacementUpdate(status=PlacementStatus.INSTALLED, area_id=area.id),
    )
    assert updated.status == PlacementStatus.INSTALLED
    assert updated.area_id == area.id

    with pytest.raises(NotFoundError):
        await iot.delete_placement(db, other_ctx, placement.id)
    await iot.delete_placement(db, ctx, placement.id)
    assert data.placements == {}
