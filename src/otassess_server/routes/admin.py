"""Admin endpoints: retention purge and orphaned-upload cleanup.

Protected by the ``ADMIN_API_KEY`` setting.  Every request must include
an ``X-Admin-Key`` header whose value matches the configured key.
Returns 401 if missing, 403 if wrong.
"""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.media import MediaStorage

from otassess_server.cleanup import purge_expired_records, remove_orphan_uploads
from otassess_server.config import DEFAULT_ORPHAN_GRACE_HOURS, ServerSettings
from otassess_server.dependencies import get_db, get_settings, get_storage

router = APIRouter(prefix="/admin", tags=["admin"])


# ------------------------------------------------------------------
# Auth dependency
# ------------------------------------------------------------------

async def require_admin_key(
    x_admin_key: str | None = Header(None, alias="X-Admin-Key"),
    settings: ServerSettings = Depends(get_settings),
) -> str:
    """Validate the ``X-Admin-Key`` header against ``ADMIN_API_KEY``.

    Raises 401 if the header is missing, 403 if the key is not
    configured or does not match.
    """
    expected = settings.admin_api_key
    if not expected:
        raise HTTPException(
            status_code=403,
            detail="Admin endpoints are disabled (ADMIN_API_KEY not configured)",
        )
    if not x_admin_key:
        raise HTTPException(status_code=401, detail="X-Admin-Key header is required")
    if not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=403, detail="Invalid admin key")
    return x_admin_key


# ------------------------------------------------------------------
# Response models
# ------------------------------------------------------------------

class CleanupResult(BaseModel):
    """Response body for cleanup operations."""
    affected_rows: int
    action: str


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/cleanup/expired")
async def purge_expired(
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(require_admin_key),
) -> CleanupResult:
    """Hard-delete archived clients and assessments past their retention date."""
    affected = await purge_expired_records(db)
    return CleanupResult(affected_rows=affected, action="purge_expired")


@router.post("/cleanup/orphan-media")
async def purge_orphan_media(
    grace_hours: int = Query(DEFAULT_ORPHAN_GRACE_HOURS, ge=0),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
    _admin: str = Depends(require_admin_key),
) -> CleanupResult:
    """Delete uploads no record references that are older than ``grace_hours``."""
    removed = await remove_orphan_uploads(db, storage, grace_hours=grace_hours)
    return CleanupResult(affected_rows=len(removed), action="orphan_media")
