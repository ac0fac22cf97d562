"""Business documents (registrations, insurance, certifications)."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin


class BusinessDocument(TimestampMixin, Base):
    """A practitioner's business document; expiring ones raise dashboard alerts."""

    __tablename__ = "business_documents"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    document_type: Mapped[str] = mapped_column(String(40), nullable=False)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    expiry_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
