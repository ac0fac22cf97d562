"""HouseMapService manual editing: room and area updates, and the map detail."""

from unittest.mock import AsyncMock

import pytest

from otassess_core.errors import NotFoundError
from otassess_core.house_maps import HouseMapService
from otassess_core.models.house_map import AreaUpdate, Position3D, RoomUpdate

from helpers.fakes import FakeHouseMapRepository, MockPlacementRow


@pytest.fixture
def maps(data, repos):
    svc = HouseMapService(AsyncMock())
    svc._repo = FakeHouseMapRepository(data)
    svc._assessments = repos["assessments"]
    return svc


@pytest.fixture
def assessment(data):
    return data.add_assessment(data.add_client())


@pytest.fixture
def house_map(data, assessment):
    return data.add_map(assessment)


@pytest.mark.asyncio
async def test_update_room_writes_only_given_fields(maps, db, ctx, data, house_map):
    room = data.add_room(house_map, name="Bathroom", length=2.5)
    updated = await maps.update_room(
        db, ctx, room.id,
        RoomUpdate(notes="No grab rails", photo_url="/uploads/bath.jpg"),
    )
    assert updated.notes == "No grab rails"
    assert updated.photo_url == "/uploads/bath.jpg"
    assert updated.name == "Bathroom"
    assert updated.length == 2.5


@pytest.mark.asyncio
async def test_update_area_position(maps, db, ctx, data, house_map):
    area = data.add_area(house_map)
    updated = await maps.update_area(
        db, ctx, area.id, AreaUpdate(position_3d=Position3D(x=4, y=0, z=-2)),
    )
    assert updated.position_3d == {"x": 4.0, "y": 0.0, "z": -2.0}


@pytest.mark.asyncio
async def test_updates_hidden_from_other_practitioner(maps, db, other_ctx, data, house_map):
    room = data.add_room(house_map)
    area = data.add_area(house_map)
    with pytest.raises(NotFoundError, match="Room"):
        await maps.update_room(db, other_ctx, room.id, RoomUpdate(name="Mine"))
    with pytest.raises(NotFoundError, match="Area"):
        await maps.update_area(db, other_ctx, area.id, AreaUpdate(name="Mine"))
    assert room.name == "Bathroom"


@pytest.mark.asyncio
async def test_detail_lists_placements(maps, db, ctx, data, assessment, house_map):
    room = data.add_room(house_map)
    device = data.add_device()
    placement = MockPlacementRow(house_map_id=house_map.id, device_id=device.id, room_id=room.id)
    data.placements[placement.id] = placement

    detail = await maps.get_for_assessment(db, ctx, assessment.id)
    assert [r.id for r in detail.rooms] == [room.id]
    assert [p.id for p in detail.placements] == [placement.id]
    assert detail.placements[0].room_id == room.id
