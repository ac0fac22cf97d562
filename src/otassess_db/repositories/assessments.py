"""Async repository for assessments, their media and equipment recommendations."""

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.assessment import Assessment, AssessmentMedia, AssessmentResponse
from otassess_db.models.client import Client
from otassess_db.models.enums import INCOMPLETE_STATUSES, AssessmentStatus
from otassess_db.models.equipment import EquipmentItem, EquipmentRecommendation
from otassess_db.models.house_map import Area, Room
from otassess_db.models.iot import IoTDevice


class AssessmentRepository:
    """Async read/write operations on ``assessments`` and child tables.

    The repository never commits; the caller owns the transaction.
    """

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        client_id: uuid.UUID,
        **fields: Any,
    ) -> Assessment:
        assessment = Assessment(user_id=user_id, client_id=client_id, **fields)
        db.add(assessment)
        await db.flush()
        return assessment

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        assessment_id: uuid.UUID,
        *,
        archived: bool | None = False,
    ) -> Assessment | None:
        """Fetch an assessment owned by ``user_id``; ``archived=None`` accepts either state."""
        stmt = select(Assessment).where(
            Assessment.id == assessment_id, Assessment.user_id == user_id,
        )
        if archived is not None:
            stmt = stmt.where(Assessment.is_archived.is_(archived))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_client_name(self, db: AsyncSession, client_id: uuid.UUID) -> str | None:
        result = await db.execute(select(Client.name).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_client_date_of_birth(
        self, db: AsyncSession, client_id: uuid.UUID,
    ) -> date | None:
        result = await db.execute(
            select(Client.date_of_birth).where(Client.id == client_id)
        )
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        client_id: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Assessment]:
        """List live assessments, most recent assessment date first."""
        stmt = select(Assessment).where(
            Assessment.user_id == user_id, Assessment.is_archived.is_(False),
        )
        if client_id is not None:
            stmt = stmt.where(Assessment.client_id == client_id)
        if status is not None:
            stmt = stmt.where(Assessment.status == status)
        stmt = (
            stmt.order_by(Assessment.assessment_date.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_archived(
        self, db: AsyncSession, user_id: str, *, search: str | None = None,
    ) -> list[Assessment]:
        stmt = (
            select(Assessment)
            .join(Client, Client.id == Assessment.client_id)
            .where(Assessment.user_id == user_id, Assessment.is_archived.is_(True))
        )
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Client.name.ilike(pattern),
                    Assessment.assessment_type.ilike(pattern),
                    Assessment.location.ilike(pattern),
                )
            )
        result = await db.execute(stmt.order_by(Assessment.archived_at.desc()))
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update(
        self, db: AsyncSession, assessment: Assessment, fields: dict[str, Any],
    ) -> Assessment:
        for key, value in fields.items():
            setattr(assessment, key, value)
        assessment.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return assessment

    async def set_status(
        self,
        db: AsyncSession,
        assessment: Assessment,
        status: AssessmentStatus,
        *,
        completed_at: datetime | None = None,
    ) -> Assessment:
        """Set the lifecycle status; incomplete statuses clear ``completed_at``."""
        assessment.status = status
        if status in INCOMPLETE_STATUSES:
            assessment.completed_at = None
        elif completed_at is not None:
            assessment.completed_at = completed_at
        assessment.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return assessment

    # ------------------------------------------------------------------
    # Archive / restore / delete
    # ------------------------------------------------------------------

    async def archive(
        self,
        db: AsyncSession,
        assessment: Assessment,
        *,
        reason: str,
        can_delete_after: datetime,
    ) -> Assessment:
        now = datetime.now(timezone.utc)
        assessment.is_archived = True
        assessment.archived_at = now
        assessment.deletion_reason = reason
        assessment.can_delete_after = can_delete_after
        assessment.updated_at = now
        await db.flush()
        return assessment

    async def restore(self, db: AsyncSession, assessment: Assessment) -> Assessment:
        assessment.is_archived = False
        assessment.archived_at = None
        assessment.deletion_reason = None
        assessment.can_delete_after = None
        assessment.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return assessment

    async def hard_delete(self, db: AsyncSession, assessment: Assessment) -> None:
        """Delete the row; child tables cascade at the database level."""
        await db.delete(assessment)
        await db.flush()

    async def list_for_client(
        self, db: AsyncSession, client_id: uuid.UUID, *, archived: bool | None = None,
    ) -> list[Assessment]:
        stmt = select(Assessment).where(Assessment.client_id == client_id)
        if archived is not None:
            stmt = stmt.where(Assessment.is_archived.is_(archived))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def restore_for_client(self, db: AsyncSession, client_id: uuid.UUID) -> int:
        """Un-archive every archived assessment of a client; returns the row count."""
        stmt = (
            update(Assessment)
            .where(Assessment.client_id == client_id, Assessment.is_archived.is_(True))
            .values(
                is_archived=False,
                archived_at=None,
                deletion_reason=None,
                can_delete_after=None,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0

    async def purge_expired(self, db: AsyncSession, *, now: datetime) -> int:
        """Permanently delete archived assessments whose retention has lapsed.

        Returns the number of rows removed.
        """
        stmt = delete(Assessment).where(
            Assessment.is_archived.is_(True),
            Assessment.can_delete_after.is_not(None),
            Assessment.can_delete_after <= now,
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    async def add_media(
        self,
        db: AsyncSession,
        *,
        assessment_id: uuid.UUID,
        type: str,
        url: str,
        caption: str | None = None,
    ) -> AssessmentMedia:
        media = AssessmentMedia(
            assessment_id=assessment_id, type=type, url=url, caption=caption,
        )
        db.add(media)
        await db.flush()
        return media

    async def list_media(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> list[AssessmentMedia]:
        stmt = (
            select(AssessmentMedia)
            .where(AssessmentMedia.assessment_id == assessment_id)
            .order_by(AssessmentMedia.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def referenced_media_urls(self, db: AsyncSession) -> set[str]:
        """Every upload URL referenced by a response, media row, catalog item or room photo."""
        urls: set[str] = set()
        for column in (
            AssessmentResponse.media_url,
            AssessmentMedia.url,
            EquipmentItem.image_url,
            IoTDevice.image_url,
            Room.photo_url,
            Area.photo_url,
        ):
            result = await db.execute(select(column).where(column.is_not(None)).distinct())
            urls.update(result.scalars().all())
        return urls

    # ------------------------------------------------------------------
    # Equipment recommendations
    # ------------------------------------------------------------------

    async def add_recommendation(
        self,
        db: AsyncSession,
        *,
        assessment_id: uuid.UUID,
        equipment_id: uuid.UUID,
        **fields: Any,
    ) -> EquipmentRecommendation:
        rec = EquipmentRecommendation(
            assessment_id=assessment_id, equipment_id=equipment_id, **fields,
        )
        db.add(rec)
        await db.flush()
        return rec

    async def list_recommendations(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> list[tuple[EquipmentRecommendation, EquipmentItem]]:
        stmt = (
            select(EquipmentRecommendation, EquipmentItem)
            .join(EquipmentItem, EquipmentItem.id == EquipmentRecommendation.equipment_id)
            .where(EquipmentRecommendation.assessment_id == assessment_id)
            .order_by(EquipmentRecommendation.created_at)
        )
        result = await db.execute(stmt)
        return [(rec, item) for rec, item in result.all()]

    async def get_recommendation(
        self, db: AsyncSession, assessment_id: uuid.UUID, recommendation_id: uuid.UUID,
    ) -> EquipmentRecommendation | None:
        stmt = select(EquipmentRecommendation).where(
            EquipmentRecommendation.id == recommendation_id,
            EquipmentRecommendation.assessment_id == assessment_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def update_recommendation(
        self, db: AsyncSession, rec: EquipmentRecommendation, fields: dict[str, Any],
    ) -> EquipmentRecommendation:
        for key, value in fields.items():
            setattr(rec, key, value)
        rec.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return rec

    async def delete_recommendation(
        self, db: AsyncSession, rec: EquipmentRecommendation,
    ) -> None:
        await db.delete(rec)
        await db.flush()

    async def count_media_by_type(
        self, db: AsyncSession, assessment_id: uuid.UUID,
    ) -> dict[str, int]:
        stmt = (
            select(AssessmentMedia.type, func.count())
            .where(AssessmentMedia.assessment_id == assessment_id)
            .group_by(AssessmentMedia.type)
        )
        result = await db.execute(stmt)
        return {media_type: count for media_type, count in result.all()}
