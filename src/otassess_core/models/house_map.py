"""House map, room, area and device placement models."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import PlacementPriority, PlacementStatus


class Position3D(BaseModel):
    x: float = 0
    y: float = 0
    z: float = 0


class RoomCreate(BaseModel):
    name: str = Field(min_length=1)
    room_type: str = Field(min_length=1, max_length=30)
    floor: int = Field(default=1, ge=0)
    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    position_3d: Optional[Position3D] = None
    features: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class AreaCreate(BaseModel):
    name: str = Field(min_length=1)
    area_type: str = Field(default="outdoor", min_length=1, max_length=30)
    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    position_3d: Optional[Position3D] = None
    features: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class RoomUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""

    name: Optional[str] = Field(default=None, min_length=1)
    room_type: Optional[str] = Field(default=None, min_length=1, max_length=30)
    floor: Optional[int] = Field(default=None, ge=0)
    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    position_3d: Optional[Position3D] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class AreaUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    area_type: Optional[str] = Field(default=None, min_length=1, max_length=30)
    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    position_3d: Optional[Position3D] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class RoomView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    house_map_id: uuid.UUID
    name: str
    room_type: str
    floor: int
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    position_3d: Optional[Position3D] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime


class AreaView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    house_map_id: uuid.UUID
    name: str
    area_type: str
    length: Optional[float] = None
    width: Optional[float] = None
    position_3d: Optional[Position3D] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime


class HouseMapView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    property_type: str
    total_area: Optional[float] = None
    floors: int
    ai_generated: bool
    created_at: datetime
    updated_at: datetime


class PlacementView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    house_map_id: uuid.UUID
    device_id: uuid.UUID
    room_id: Optional[uuid.UUID] = None
    area_id: Optional[uuid.UUID] = None
    quantity: int
    position_3d: Position3D
    placement_reason: Optional[str] = None
    priority: PlacementPriority
    status: PlacementStatus
    installation_notes: Optional[str] = None
    ai_recommended: bool
    created_at: datetime


class HouseMapDetail(BaseModel):
    house_map: HouseMapView
    rooms: List[RoomView]
    areas: List[AreaView]
    placements: List[PlacementView] = Field(default_factory=list)


class GeneratedHouseMap(HouseMapDetail):
    """Response of ``POST /api/ai/generate-3d-map``."""

    success: bool = True
    model: str
    ai_analyzed: bool
