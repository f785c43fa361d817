"""Reading and editing the signed-in user's profile."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool

from ..backend import BackendClient, Identity
from ..backend.tables import Row
from .media_service import ImageUpload, profile_image_key, upload_public_image
from .results import FlowResult

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

PROFILE_FETCH_FAILED = "Failed to fetch profile"
PROFILE_UPDATED = "Profile updated successfully"
PROFILE_UPDATE_FAILED = "Failed to update profile"
PROFILE_IMAGE_FAILED = "Failed to upload profile image"


@dataclass(frozen=True)
class ProfileDraft:
    name: str
    phone: str | None = None
    bio: str | None = None


async def load_profile(backend: BackendClient, identity: Identity) -> FlowResult[Row]:
    result = await run_in_threadpool(
        backend.tables.select_one, PROFILES_TABLE, filters={"id": identity.id}
    )
    if result.error is not None:
        logger.error("Error fetching profile %s: %s", identity.id, result.error)
        return FlowResult.failure(PROFILE_FETCH_FAILED)
    return FlowResult.success(result.data)


async def update_profile(
    backend: BackendClient,
    identity: Identity,
    draft: ProfileDraft,
    image: ImageUpload | None = None,
) -> FlowResult[Row]:
    """Save name, phone, bio and picture. The email column is never written here."""

    current = await load_profile(backend, identity)
    if not current.ok or current.value is None:
        return current

    profile_image = current.value.get("profile_image")
    if image is not None:
        # Same key every time; the upload overwrites the previous picture.
        uploaded = await upload_public_image(
            backend, profile_image_key(identity.id, image.filename), image, upsert=True
        )
        if uploaded.error is not None:
            return FlowResult.failure(PROFILE_IMAGE_FAILED)
        profile_image = uploaded.data

    patch = {
        "name": draft.name.strip(),
        "phone": (draft.phone or "").strip() or None,
        "bio": (draft.bio or "").strip() or None,
        "profile_image": profile_image,
    }
    updated = await run_in_threadpool(
        backend.tables.update, PROFILES_TABLE, patch, filters={"id": identity.id}
    )
    if updated.error is not None or not updated.data:
        logger.error("Error updating profile %s: %s", identity.id, updated.error or "no rows matched")
        return FlowResult.failure(PROFILE_UPDATE_FAILED)
    return FlowResult.success(updated.data[0])


__all__ = [
    "PROFILE_FETCH_FAILED",
    "PROFILE_IMAGE_FAILED",
    "PROFILE_UPDATED",
    "PROFILE_UPDATE_FAILED",
    "ProfileDraft",
    "load_profile",
    "update_profile",
]
