"""IoT device library and device placement models."""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import PlacementPriority, PlacementStatus

from otassess_core.models.house_map import Position3D


class IoTDeviceCreate(BaseModel):
    name: str = Field(min_length=1)
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    category: str = Field(min_length=1, max_length=30)
    device_type: str = Field(min_length=1, max_length=40)
    description: Optional[str] = None
    technical_specs: Dict[str, Any] = Field(default_factory=dict)
    placement_rules: Optional[Dict[str, Any]] = None
    coverage_area: Optional[float] = Field(default=None, gt=0)
    power_requirements: Optional[str] = Field(default=None, max_length=30)
    connectivity: Optional[str] = Field(default=None, max_length=30)
    price: float = Field(ge=0)
    installation_cost: Optional[float] = Field(default=None, ge=0)
    subscription_cost: Optional[float] = Field(default=None, ge=0)
    subscription_type: Optional[str] = Field(default=None, max_length=20)
    image_url: Optional[str] = None
    documentation_url: Optional[str] = None
    approved_for: Optional[List[str]] = None


class IoTDeviceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=30)
    device_type: Optional[str] = Field(default=None, min_length=1, max_length=40)
    description: Optional[str] = None
    technical_specs: Optional[Dict[str, Any]] = None
    placement_rules: Optional[Dict[str, Any]] = None
    coverage_area: Optional[float] = Field(default=None, gt=0)
    power_requirements: Optional[str] = Field(default=None, max_length=30)
    connectivity: Optional[str] = Field(default=None, max_length=30)
    price: Optional[float] = Field(default=None, ge=0)
    installation_cost: Optional[float] = Field(default=None, ge=0)
    subscription_cost: Optional[float] = Field(default=None, ge=0)
    subscription_type: Optional[str] = Field(default=None, max_length=20)
    image_url: Optional[str] = None
    documentation_url: Optional[str] = None
    approved_for: Optional[List[str]] = None


class IoTDeviceView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    category: str
    device_type: str
    description: Optional[str] = None
    technical_specs: Dict[str, Any]
    placement_rules: Optional[Dict[str, Any]] = None
    coverage_area: Optional[float] = None
    power_requirements: Optional[str] = None
    connectivity: Optional[str] = None
    price: float
    installation_cost: Optional[float] = None
    subscription_cost: Optional[float] = None
    subscription_type: Optional[str] = None
    image_url: Optional[str] = None
    documentation_url: Optional[str] = None
    approved_for: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class PlacementCreate(BaseModel):
    device_id: uuid.UUID
    room_id: Optional[uuid.UUID] = None
    area_id: Optional[uuid.UUID] = None
    quantity: int = Field(default=1, ge=1)
    position_3d: Position3D
    placement_reason: Optional[str] = None
    priority: PlacementPriority = PlacementPriority.RECOMMENDED
    installation_notes: Optional[str] = None
    ai_recommended: bool = False


class PlacementUpdate(BaseModel):
    room_id: Optional[uuid.UUID] = None
    area_id: Optional[uuid.UUID] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    position_3d: Optional[Position3D] = None
    placement_reason: Optional[str] = None
    priority: Optional[PlacementPriority] = None
    status: Optional[PlacementStatus] = None
    installation_notes: Optional[str] = None

