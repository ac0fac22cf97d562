"""Assessment, response and media ORM models.

Child rows reference their assessment with ``ON DELETE CASCADE`` so a
permanent assessment delete removes responses, media, recommendations,
the house map and billing documents in one statement.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from otassess_db.models.base import Base, TimestampMixin, utcnow
from otassess_db.models.enums import AssessmentStatus, AssessmentType


class Assessment(TimestampMixin, Base):
    """One practitioner visit/evaluation of one client."""

    __tablename__ = "assessments"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assessment_type: Mapped[AssessmentType] = mapped_column(
        String(30), nullable=False, default=AssessmentType.HOME,
    )
    status: Mapped[AssessmentStatus] = mapped_column(
        String(20), nullable=False, default=AssessmentStatus.DRAFT, index=True,
    )
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessment_date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    report_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )

    # --- Archival ---
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )
    deletion_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    can_delete_after: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True,
    )

    __table_args__ = (
        Index(
            "ix_assessments_live_user",
            "user_id",
            "created_at",
            postgresql_where=text("is_archived = false"),
        ),
        Index(
            "ix_assessments_retention",
            "can_delete_after",
            postgresql_where=text("is_archived = true"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Assessment(id={self.id!s}, user={self.user_id!r}, "
            f"type={self.assessment_type!r}, status={self.status!r})>"
        )


class AssessmentResponse(TimestampMixin, Base):
    """The saved answer to one question within one assessment.

    The (assessment_id, question_id) pair is unique: saving again for the
    same question overwrites this row rather than adding a second one.
    """

    __tablename__ = "assessment_responses"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_id: Mapped[str] = mapped_column(Text, nullable=False)
    section_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Checkbox answers are a JSON-encoded array of option labels
    answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ai_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    needs_follow_up: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )

    __table_args__ = (
        UniqueConstraint(
            "assessment_id", "question_id", name="uq_response_assessment_question",
        ),
        Index("ix_responses_question", "question_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AssessmentResponse(id={self.id!s}, assessment={self.assessment_id!s}, "
            f"question={self.question_id!r})>"
        )


class AssessmentMedia(TimestampMixin, Base):
    """A photo, video or audio clip captured during an assessment."""

    __tablename__ = "assessment_media"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
