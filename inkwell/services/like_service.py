"""Like/unlike coordination between the local mirror and the backend."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from ..backend import BackendClient, BackendError, Identity
from .feed_cache import FeedState, FeedStateStore
from .feed_service import LIKES_TABLE, POSTS_TABLE, load_feed

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "unique_violation"


@dataclass(frozen=True)
class ToggleOutcome:
    state: FeedState
    post_id: UUID
    applied: bool
    error: BackendError | None = None

    @property
    def liked(self) -> bool:
        return self.state.is_liked(self.post_id)

    @property
    def like_count(self) -> int:
        return self.state.count_for(self.post_id)


async def toggle_like(
    backend: BackendClient,
    identity: Identity | None,
    state: FeedState,
    post_id: UUID,
) -> ToggleOutcome:
    """Flip the viewer's like on ``post_id``.

    The membership row is written first. The counter only moves once that
    succeeds, and a failed counter write still updates the local mirror.
    Without an identity nothing happens.
    """

    if identity is None:
        return ToggleOutcome(state=state, post_id=post_id, applied=False)

    membership = {"user_id": identity.id, "post_id": post_id}
    counter_filter = {"id": post_id}

    if state.is_liked(post_id):
        removed = await run_in_threadpool(backend.tables.delete, LIKES_TABLE, filters=membership)
        if removed.error is not None:
            logger.error("Error unliking post %s: %s", post_id, removed.error)
            return ToggleOutcome(state=state, post_id=post_id, applied=False, error=removed.error)
        if not removed.data:
            # Another request already removed the row and moved the counter.
            logger.info("Like on post %s was already removed", post_id)
            return ToggleOutcome(state=state.with_unlike(post_id), post_id=post_id, applied=False)

        counter = await run_in_threadpool(
            backend.tables.increment, POSTS_TABLE, "likes", -1, filters=counter_filter
        )
        if counter.error is not None:
            logger.error("Error updating like count for post %s: %s", post_id, counter.error)
        return ToggleOutcome(state=state.with_unlike(post_id, counter.data), post_id=post_id, applied=True)

    inserted = await run_in_threadpool(backend.tables.insert, LIKES_TABLE, membership)
    if inserted.error is not None and inserted.error.code == UNIQUE_VIOLATION:
        logger.info("Post %s was already liked by %s", post_id, identity.id)
        return ToggleOutcome(state=state.with_like(post_id), post_id=post_id, applied=False)
    if inserted.error is not None:
        logger.error("Error liking post %s: %s", post_id, inserted.error)
        return ToggleOutcome(state=state, post_id=post_id, applied=False, error=inserted.error)

    counter = await run_in_threadpool(
        backend.tables.increment, POSTS_TABLE, "likes", 1, filters=counter_filter
    )
    if counter.error is not None:
        logger.error("Error updating like count for post %s: %s", post_id, counter.error)
    return ToggleOutcome(state=state.with_like(post_id, counter.data), post_id=post_id, applied=True)


async def toggle_like_for_viewer(
    backend: BackendClient,
    store: FeedStateStore,
    identity: Identity | None,
    post_id: UUID,
) -> ToggleOutcome:
    """Toggle using the viewer's cached feed state, loading it first when absent."""

    if identity is None:
        return await toggle_like(backend, None, FeedState(), post_id)

    state = store.get(identity.id)
    if state is None or post_id not in state.like_counts:
        state = store.put(identity.id, (await load_feed(backend, identity)).state)
        if post_id not in state.like_counts:
            missing = BackendError("Post not found", code="not_found")
            return ToggleOutcome(state=state, post_id=post_id, applied=False, error=missing)

    outcome = await toggle_like(backend, identity, state, post_id)
    # A failed toggle hands back the snapshot read before the await; a newer one may be cached.
    if outcome.state is not state:
        store.put(identity.id, outcome.state)
    return outcome


__all__ = ["ToggleOutcome", "toggle_like", "toggle_like_for_viewer"]
