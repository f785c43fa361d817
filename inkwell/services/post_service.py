"""Creating and editing posts, including their optional cover image."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from ..backend import BackendClient, Identity
from ..backend.tables import Row
from .feed_service import POSTS_TABLE
from .media_service import ImageUpload, discard_uploaded_image, post_image_key, upload_public_image
from .results import FlowResult

logger = logging.getLogger(__name__)

DASHBOARD_ROUTE = "/dashboard"

POST_CREATED = "Your post has been created successfully!"
POST_UPDATED = "Post updated successfully"
EDIT_NOT_ALLOWED = "Failed to fetch post or you don't have permission to edit it"
UPLOAD_FAILED = "Failed to upload image"
UPDATE_FAILED = "Failed to update post"


@dataclass(frozen=True)
class PostDraft:
    title: str
    content: str
    excerpt: str | None = None

    def record(self) -> dict[str, str | None]:
        return {
            "title": self.title.strip(),
            "content": self.content,
            "excerpt": (self.excerpt or "").strip() or None,
        }


async def _store_image(
    backend: BackendClient,
    identity: Identity,
    image: ImageUpload,
) -> tuple[str, str] | None:
    key = post_image_key(identity.id, image.filename)
    uploaded = await upload_public_image(backend, key, image)
    if uploaded.error is not None or uploaded.data is None:
        return None
    return key, uploaded.data


async def create_post(
    backend: BackendClient,
    identity: Identity,
    draft: PostDraft,
    image: ImageUpload | None = None,
) -> FlowResult[Row]:
    """Upload the optional image, then insert the post owned by ``identity``."""

    image_url: str | None = None
    uploaded_key: str | None = None
    if image is not None:
        stored = await _store_image(backend, identity, image)
        if stored is None:
            return FlowResult.failure(UPLOAD_FAILED)
        uploaded_key, image_url = stored

    record = {**draft.record(), "image": image_url, "author_id": identity.id}
    inserted = await run_in_threadpool(backend.tables.insert, POSTS_TABLE, record)
    if inserted.error is not None:
        logger.error("Error creating post: %s", inserted.error)
        if uploaded_key is not None:
            await discard_uploaded_image(backend, uploaded_key)
        return FlowResult.failure(inserted.error.message)

    logger.info("Post %s created by %s", inserted.data["id"], identity.id)
    return FlowResult.success(inserted.data, redirect_to=DASHBOARD_ROUTE)


async def load_post_for_edit(
    backend: BackendClient,
    identity: Identity,
    post_id: UUID | str,
) -> FlowResult[Row]:
    """The post, only if ``identity`` wrote it."""

    result = await run_in_threadpool(
        backend.tables.select_one,
        POSTS_TABLE,
        filters={"id": post_id, "author_id": identity.id},
    )
    if result.error is not None:
        logger.warning("Edit of post %s refused for %s: %s", post_id, identity.id, result.error)
        return FlowResult.failure(EDIT_NOT_ALLOWED, redirect_to=DASHBOARD_ROUTE)
    return FlowResult.success(result.data)


async def update_post(
    backend: BackendClient,
    identity: Identity,
    post_id: UUID | str,
    draft: PostDraft,
    image: ImageUpload | None = None,
    *,
    remove_image: bool = False,
) -> FlowResult[Row]:
    """Apply the edit form to a post owned by ``identity``.

    A new image replaces the current one; ``remove_image`` clears it.
    """

    current = await load_post_for_edit(backend, identity, post_id)
    if not current.ok or current.value is None:
        return current

    image_url: str | None = None if remove_image else current.value.get("image") or None
    uploaded_key: str | None = None
    if image is not None:
        stored = await _store_image(backend, identity, image)
        if stored is None:
            return FlowResult.failure(UPLOAD_FAILED)
        uploaded_key, image_url = stored

    patch = {**draft.record(), "image": image_url}
    updated = await run_in_threadpool(
        backend.tables.update,
        POSTS_TABLE,
        patch,
        filters={"id": post_id, "author_id": identity.id},
    )
    if updated.error is not None or not updated.data:
        logger.error("Error updating post %s: %s", post_id, updated.error or "no rows matched")
        if uploaded_key is not None:
            await discard_uploaded_image(backend, uploaded_key)
        return FlowResult.failure(UPDATE_FAILED)

    return FlowResult.success(updated.data[0], redirect_to=DASHBOARD_ROUTE)


__all__ = [
    "DASHBOARD_ROUTE",
    "EDIT_NOT_ALLOWED",
    "POST_CREATED",
    "POST_UPDATED",
    "PostDraft",
    "create_post",
    "load_post_for_edit",
    "update_post",
]
