"""Upload endpoints: raw media and documents go to ``MediaStorage``.

The returned URL is what responses, media rows, equipment items and
business documents store.  Serving the files is left to the web server
in front of the API.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from otassess_core.context import RequestContext
from otassess_core.media import (
    DOCUMENT_MIME_TYPES,
    MEDIA_MIME_TYPES,
    MediaStorage,
    StoredMedia,
    check_upload,
)

from otassess_server.config import ServerSettings
from otassess_server.dependencies import get_request_context, get_settings, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


# ------------------------------------------------------------------
# Response models
# ------------------------------------------------------------------

class UploadResult(BaseModel):
    success: bool = True
    url: str
    filename: str


# ------------------------------------------------------------------
# Shared helper (also used by assessment media)
# ------------------------------------------------------------------

async def store_upload(
    file: UploadFile,
    storage: MediaStorage,
    *,
    allowed: dict[str, str],
    max_bytes: int,
) -> StoredMedia:
    """Validate the multipart file and write it to storage.

    Raises 400 for an empty file or a disallowed type and 413 when the
    file exceeds ``max_bytes``.
    """
    data = await file.read()
    extension = check_upload(data, file.content_type, allowed=allowed, max_bytes=max_bytes)
    stored = await storage.save(data, mime_type=stored_mime(file), extension=extension)
    logger.info("Stored upload %s (%d bytes)", stored.url, stored.size)
    return stored


def stored_mime(file: UploadFile) -> str:
    return (file.content_type or "").split(";", 1)[0].strip().lower()


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/image")
async def upload_image(
    image: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
    storage: MediaStorage = Depends(get_storage),
    settings: ServerSettings = Depends(get_settings),
) -> UploadResult:
    """Upload a photo, video or audio clip captured during an assessment."""
    stored = await store_upload(
        image, storage, allowed=MEDIA_MIME_TYPES, max_bytes=settings.max_upload_bytes,
    )
    return UploadResult(url=stored.url, filename=stored.filename)


@router.post("/document")
async def upload_document(
    file: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
    storage: MediaStorage = Depends(get_storage),
    settings: ServerSettings = Depends(get_settings),
) -> UploadResult:
    """Upload a PDF or text document (catalogs, business documents)."""
    stored = await store_upload(
        file, storage, allowed=DOCUMENT_MIME_TYPES, max_bytes=settings.max_upload_bytes,
    )
    return UploadResult(url=stored.url, filename=stored.filename)
