"""Equipment catalog models."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import EquipmentCategory


class EquipmentCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: EquipmentCategory
    price: float = Field(ge=0)
    supplier_price: Optional[float] = Field(default=None, ge=0)
    margin: Optional[float] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    specifications: Optional[str] = None
    government_approved: bool = False
    approval_reference: Optional[str] = None
    image_url: Optional[str] = None


class EquipmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[EquipmentCategory] = None
    price: Optional[float] = Field(default=None, ge=0)
    supplier_price: Optional[float] = Field(default=None, ge=0)
    margin: Optional[float] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    specifications: Optional[str] = None
    government_approved: Optional[bool] = None
    approval_reference: Optional[str] = None
    image_url: Optional[str] = None


class EquipmentView(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: str
    price: float
    supplier_price: Optional[float] = None
    margin: Optional[float] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    specifications: Optional[str] = None
    government_approved: bool = False
    approval_reference: Optional[str] = None
    image_url: Optional[str] = None
    source_catalog: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CatalogParseResult(BaseModel):
    """Outcome of a best-effort catalog import.

    ``equipment_count`` and ``created_count`` are the same number; both are
    kept because clients read the former.
    """

    success: bool = True
    equipment_count: int
    created_count: int
    attempted_count: int
    failed_count: int
    model: Optional[str] = None
    equipment: list[EquipmentView] = Field(default_factory=list)
