"""Business document models (insurance, registrations, certificates)."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    title: str = Field(min_length=1)
    document_type: str = Field(min_length=1, max_length=40)
    file_url: Optional[str] = None
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    document_type: Optional[str] = Field(default=None, min_length=1, max_length=40)
    file_url: Optional[str] = None
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None


class DocumentView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    document_type: str
    file_url: Optional[str] = None
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
