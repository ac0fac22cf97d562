"""Report models.  ``data`` shape depends on ``report_type``; see ``otassess_core.reports``."""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from otassess_db.models.enums import ReportType

# Sections a custom report may select
CUSTOM_COLUMNS = ("clients", "assessments", "invoices", "appointments")


class ReportRequest(BaseModel):
    report_type: ReportType
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    filters: Optional[Dict[str, Any]] = None
    columns: Optional[List[str]] = None


class ReportView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    report_type: ReportType
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    data: Dict[str, Any]
    filters: Optional[Dict[str, Any]] = None
    columns: Optional[List[str]] = None
    status: str
    created_at: datetime
    updated_at: datetime
