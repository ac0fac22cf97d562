"""Media storage for uploaded photos, videos, audio and catalog documents.

Uploads are written under a single directory with a random file name and
served elsewhere (static file serving is external) from ``url_prefix``.
The returned URL is what responses, media rows and catalog items store.

Files no row references any more (a draft abandoned after upload, a
response that was re-recorded) are found by ``find_orphans`` and removed
by the ``otassess-cleanup --orphan-media`` job.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from otassess_db.models.enums import MediaType

from otassess_core.errors import (
    AnswerValidationError,
    NotFoundError,
    PayloadTooLargeError,
    UploadError,
)

logger = logging.getLogger(__name__)

# MIME type -> stored file extension
MEDIA_MIME_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/wav": ".wav",
    "audio/webm": ".weba",
}

DOCUMENT_MIME_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "text/plain": ".txt",
    "text/csv": ".csv",
}

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

_ISO_BMFF_BOXES = (b"ftyp", b"moov", b"mdat", b"wide", b"free", b"skip")
_HEIF_BRANDS = (b"heic", b"heix", b"hevc", b"hevx", b"mif1", b"msf1")


def _is_iso_bmff(data: bytes) -> bool:
    return data[4:8] in _ISO_BMFF_BOXES


def _is_riff(data: bytes, form: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == form


def _is_mpeg_audio(data: bytes) -> bool:
    if data.startswith(b"ID3"):
        return True
    # MPEG frame sync: eleven set bits
    return len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0


def _is_text(data: bytes) -> bool:
    return b"\x00" not in data[:4096]


# MIME type -> check on the leading bytes of the file
SIGNATURES: dict[str, Callable[[bytes], bool]] = {
    "image/jpeg": lambda d: d.startswith(b"\xff\xd8\xff"),
    "image/png": lambda d: d.startswith(b"\x89PNG\r\n\x1a\n"),
    "image/webp": lambda d: _is_riff(d, b"WEBP"),
    "image/heic": lambda d: d[4:8] == b"ftyp" and d[8:12] in _HEIF_BRANDS,
    "video/mp4": lambda d: d[4:8] == b"ftyp",
    "video/quicktime": _is_iso_bmff,
    "video/webm": lambda d: d.startswith(b"\x1a\x45\xdf\xa3"),
    "audio/mpeg": _is_mpeg_audio,
    "audio/mp4": lambda d: d[4:8] == b"ftyp",
    "audio/wav": lambda d: _is_riff(d, b"WAVE"),
    "audio/webm": lambda d: d.startswith(b"\x1a\x45\xdf\xa3"),
    "application/pdf": lambda d: d.startswith(b"%PDF-"),
    "text/plain": _is_text,
    "text/csv": _is_text,
}


@dataclass(frozen=True)
class StoredMedia:
    url: str
    filename: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class StoredObject:
    url: str
    modified_at: datetime


def media_type_for(mime_type: str) -> MediaType:
    """Map a MIME type onto photo/video/audio."""
    major = mime_type.split("/", 1)[0]
    if major == "image":
        return MediaType.PHOTO
    if major == "video":
        return MediaType.VIDEO
    if major == "audio":
        return MediaType.AUDIO
    raise AnswerValidationError(f"Unsupported media type: {mime_type}", field="type")


def check_upload(
    data: bytes,
    mime_type: str | None,
    *,
    allowed: dict[str, str],
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> str:
    """Validate an upload and return the extension to store it under.

    Raises:
        AnswerValidationError: empty body, a MIME type not in ``allowed``,
            or content whose signature does not match the declared type.
        PayloadTooLargeError: body larger than ``max_bytes``.
    """
    if not data:
        raise AnswerValidationError("Uploaded file is empty", field="file")
    if len(data) > max_bytes:
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime not in allowed:
        raise AnswerValidationError(
            f"Unsupported file type: {mime or 'unknown'}", field="file",
        )
    check = SIGNATURES.get(mime)
    if check is not None and not check(data):
        logger.info("Rejected upload declared as %s: signature mismatch", mime)
        raise AnswerValidationError(
            f"File content does not match its type: {mime}", field="file",
        )
    return allowed[mime]


# ------------------------------------------------------------------
# Storage backends
# ------------------------------------------------------------------

class MediaStorage(ABC):
    """Where uploaded bytes live.

    Implementations raise ``UploadError`` when the backend cannot store or
    remove an object, and ``NotFoundError`` for URLs they do not own.
    """

    @abstractmethod
    async def save(self, data: bytes, *, mime_type: str, extension: str) -> StoredMedia:
        ...

    @abstractmethod
    async def read(self, url: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, url: str) -> None:
        ...

    @abstractmethod
    async def list_objects(self) -> list[StoredObject]:
        ...


class LocalMediaStorage(MediaStorage):
    """Files in ``upload_dir``, addressed as ``{url_prefix}/{filename}``."""

    def __init__(self, upload_dir: str | Path, url_prefix: str = "/uploads") -> None:
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _url(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def _path(self, url: str) -> Path:
        prefix = self.url_prefix + "/"
        if not url.startswith(prefix):
            raise NotFoundError("Upload", url)
        filename = url[len(prefix):]
        # Flat directory; anything with a separator is not ours
        if not filename or os.path.basename(filename) != filename or filename.startswith("."):
            raise NotFoundError("Upload", url)
        return self.upload_dir / filename

    def _write(self, path: Path, data: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save(self, data: bytes, *, mime_type: str, extension: str) -> StoredMedia:
        filename = f"{uuid.uuid4().hex}{extension}"
        path = self.upload_dir / filename
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            logger.error("Failed to store upload %s: %s", path, exc)
            raise UploadError("Failed to store uploaded file", details=str(exc)) from exc
        logger.info("Stored upload %s (%s, %d bytes)", filename, mime_type, len(data))
        return StoredMedia(
            url=self._url(filename), filename=filename, mime_type=mime_type, size=len(data),
        )

    async def read(self, url: str) -> bytes:
        path = self._path(url)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise NotFoundError("Upload", url) from exc
        except OSError as exc:
            raise UploadError("Failed to read uploaded file", details=str(exc)) from exc

    async def delete(self, url: str) -> None:
        path = self._path(url)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as exc:
            raise UploadError("Failed to delete uploaded file", details=str(exc)) from exc

    def _scan(self) -> list[StoredObject]:
        if not self.upload_dir.is_dir():
            return []
        objects = []
        for entry in self.upload_dir.iterdir():
            if not entry.is_file() or entry.name.startswith("."):
                continue
            modified = datetime.fromtimestamp(entry.stat().st_mtime, tz=timezone.utc)
            objects.append(StoredObject(url=self._url(entry.name), modified_at=modified))
        return objects

    async def list_objects(self) -> list[StoredObject]:
        return await asyncio.to_thread(self._scan)


# ------------------------------------------------------------------
# Orphan reconciliation
# ------------------------------------------------------------------

def find_orphans(
    objects: list[StoredObject], referenced: set[str], *, older_than: datetime,
) -> list[str]:
    """URLs of stored objects that nothing references and that predate ``older_than``.

    The age cut-off leaves a grace period for uploads whose response has
    not been saved yet.
    """
    return sorted(
        obj.url for obj in objects
        if obj.url not in referenced and obj.modified_at < older_than
    )


async def delete_orphans(
    storage: MediaStorage, referenced: set[str], *, older_than: datetime,
) -> list[str]:
    """Delete orphaned uploads; returns the URLs removed."""
    orphans = find_orphans(await storage.list_objects(), referenced, older_than=older_than)
    removed = []
    for url in orphans:
        try:
            await storage.delete(url)
        except UploadError as exc:
            logger.warning("Could not delete orphan %s: %s", url, exc.details)
            continue
        removed.append(url)
    logger.info("Removed %d of %d orphaned uploads", len(removed), len(orphans))
    return removed
