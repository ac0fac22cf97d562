"""Retention and upload cleanup CLI: ``otassess-cleanup``.

Provides a standalone command that connects to the database and runs the
maintenance jobs.  Intended for cron jobs or one-off maintenance.

Default behaviour: permanently delete archived clients and assessments
whose retention period has lapsed.

Examples::

    # Purge archived records past their retention date
    otassess-cleanup

    # Remove uploads nothing references, older than 24 hours
    otassess-cleanup --orphan-media

    # Both, with a one-week grace period for uploads
    otassess-cleanup --purge-expired --orphan-media --grace-hours 168
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.media import MediaStorage, delete_orphans

from otassess_server.config import DEFAULT_ORPHAN_GRACE_HOURS

logger = logging.getLogger(__name__)


async def purge_expired_records(db: AsyncSession, *, now: datetime | None = None) -> int:
    """Hard-delete archived assessments, then clients, past ``can_delete_after``."""
    from otassess_db.repositories import AssessmentRepository, ClientRepository

    now = now or datetime.now(timezone.utc)
    assessments = await AssessmentRepository().purge_expired(db, now=now)
    clients = await ClientRepository().purge_expired(db, now=now)
    logger.info(
        "Retention purge: assessments=%d, clients=%d", assessments, clients,
    )
    return assessments + clients


async def remove_orphan_uploads(
    db: AsyncSession,
    storage: MediaStorage,
    *,
    grace_hours: int = DEFAULT_ORPHAN_GRACE_HOURS,
    now: datetime | None = None,
) -> list[str]:
    """Delete uploads that no row references and that are older than the grace period."""
    from otassess_db.repositories import AssessmentRepository, DocumentRepository

    now = now or datetime.now(timezone.utc)
    referenced = await AssessmentRepository().referenced_media_urls(db)
    referenced |= await DocumentRepository().referenced_file_urls(db)
    removed = await delete_orphans(
        storage, referenced, older_than=now - timedelta(hours=grace_hours),
    )
    logger.info("Orphan cleanup: removed=%d, grace_hours=%d", len(removed), grace_hours)
    return removed


async def run_cleanup(
    *,
    purge_expired: bool = True,
    orphan_media: bool = False,
    grace_hours: int = DEFAULT_ORPHAN_GRACE_HOURS,
) -> int:
    """Execute the selected jobs and return the number of affected rows/files.

    Creates its own database session, runs the jobs, and commits.
    """
    # Lazy imports to avoid loading DB machinery at module import time
    from otassess_core.media import LocalMediaStorage
    from otassess_db.engine import dispose_engine, get_session_factory

    from otassess_server.config import load_settings

    factory = get_session_factory()
    affected = 0

    try:
        async with factory() as db:
            if purge_expired:
                affected += await purge_expired_records(db)
            if orphan_media:
                settings = load_settings()
                storage = LocalMediaStorage(settings.upload_dir, settings.upload_url_prefix)
                affected += len(
                    await remove_orphan_uploads(db, storage, grace_hours=grace_hours)
                )
            await db.commit()
        return affected
    finally:
        await dispose_engine()


def cli() -> None:
    """Console-script entry point: ``otassess-cleanup``.

    Parses command-line arguments and runs the async cleanup function.
    """
    parser = argparse.ArgumentParser(
        prog="otassess-cleanup",
        description="Purge expired archived records and orphaned uploads.",
    )
    parser.add_argument(
        "--purge-expired",
        action="store_true",
        default=False,
        help="Hard-delete archived clients/assessments past their retention date",
    )
    parser.add_argument(
        "--orphan-media",
        action="store_true",
        default=False,
        help="Delete uploaded files that no record references",
    )
    parser.add_argument(
        "--grace-hours",
        type=int,
        default=DEFAULT_ORPHAN_GRACE_HOURS,
        help=(
            "Only delete orphaned uploads older than this many hours "
            "(default: $ORPHAN_GRACE_HOURS, or 24)"
        ),
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # No job selected means the retention purge
    purge = args.purge_expired or not args.orphan_media
    affected = asyncio.run(
        run_cleanup(
            purge_expired=purge,
            orphan_media=args.orphan_media,
            grace_hours=args.grace_hours,
        )
    )

    print(f"Affected rows: {affected}")
    sys.exit(0)
