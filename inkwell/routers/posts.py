"""Feed and like API routes used by the browser script."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..backend import BackendClient, Identity, get_backend
from ..schemas import FeedPostResponse, FeedResponse, LikeToggleResponse
from ..services import (
    FeedStateStore,
    get_feed_state_store,
    get_optional_identity,
    load_feed,
    serialize_post,
    toggle_like_for_viewer,
)
from ..services.feed_service import like_label

router = APIRouter(prefix="/api", tags=["posts"])

logger = logging.getLogger(__name__)


@router.get("/feed", response_model=FeedResponse)
async def feed_endpoint(
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
    store: FeedStateStore = Depends(get_feed_state_store),
) -> FeedResponse:
    snapshot = await load_feed(backend, identity, with_authors=True)
    if identity is not None:
        store.put(identity.id, snapshot.state)
    items = [FeedPostResponse.model_validate(serialize_post(post, snapshot.state)) for post in snapshot.posts]
    return FeedResponse(items=items)


@router.post("/posts/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like_endpoint(
    post_id: UUID,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
    store: FeedStateStore = Depends(get_feed_state_store),
) -> LikeToggleResponse:
    outcome = await toggle_like_for_viewer(backend, store, identity, post_id)
    if outcome.error is not None and outcome.error.code == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    return LikeToggleResponse(
        post_id=post_id,
        liked=outcome.liked,
        likes=outcome.like_count,
        like_label=like_label(outcome.like_count),
        applied=outcome.applied,
        error=outcome.error.code if outcome.error is not None else None,
    )


__all__ = ["router"]
