"""Image uploads for posts and profiles."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import BinaryIO
from uuid import UUID

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from ..backend import BackendClient, BackendResponse, file_extension
from ..config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """A user-selected image waiting to be stored."""

    filename: str
    fileobj: BinaryIO
    content_type: str | None = None

    @classmethod
    def from_upload(cls, file: UploadFile | None) -> "ImageUpload | None":
        """Wrap a submitted form file; an empty file input yields ``None``."""

        if file is None or not (file.filename or "").strip():
            return None
        return cls(filename=file.filename or "", fileobj=file.file, content_type=file.content_type)


def _with_extension(stem: str, filename: str) -> str:
    extension = file_extension(filename)
    return f"{stem}.{extension}" if extension else stem


def post_image_key(user_id: UUID, filename: str, *, now_ms: int | None = None) -> str:
    """Object key for a post image: ``{user_id}/{epoch millis}.{ext}``."""

    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    return _with_extension(f"{user_id}/{millis}", filename)


def profile_image_key(user_id: UUID, filename: str) -> str:
    """Object key for a profile picture; reuploads overwrite it."""

    return _with_extension(f"{user_id}/profile", filename)


async def upload_public_image(
    backend: BackendClient,
    key: str,
    image: ImageUpload,
    *,
    upsert: bool = False,
) -> BackendResponse[str]:
    """Upload ``image`` to the images bucket and return its public URL."""

    bucket = get_settings().storage_bucket
    stored = await run_in_threadpool(
        backend.storage.upload,
        bucket,
        key,
        image.fileobj,
        content_type=image.content_type,
        upsert=upsert,
    )
    if stored.error is not None or stored.data is None:
        logger.error("Error uploading image %s: %s", key, stored.error)
        return BackendResponse(error=stored.error)
    return BackendResponse.success(backend.storage.get_public_url(bucket, stored.data))


async def discard_uploaded_image(backend: BackendClient, key: str) -> None:
    """Remove an object whose row write failed after it was uploaded."""

    removed = await run_in_threadpool(backend.storage.remove, get_settings().storage_bucket, [key])
    if removed.error is not None:
        logger.warning("Could not remove orphaned image %s: %s", key, removed.error)
    else:
        logger.info("Removed orphaned image %s", key)


__all__ = [
    "ImageUpload",
    "discard_uploaded_image",
    "post_image_key",
    "profile_image_key",
    "upload_public_image",
]
