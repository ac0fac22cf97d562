"""Generated practice reports.

A report is a snapshot: ``data`` is computed once at generation time and
stored, so later edits to invoices or assessments do not change it.
"""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin
from otassess_db.models.enums import ReportType


class Report(TimestampMixin, Base):
    __tablename__ = "reports"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    report_type: Mapped[ReportType] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    data: Mapped[dict] = mapped_column(JSONB, nullable=False)
    filters: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    columns: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generated")
