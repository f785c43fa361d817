"""Pydantic schemas for the feed and like endpoints."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class FeedPostResponse(BaseModel):
    """A post as shown in the feed, with the viewer's like state."""

    id: UUID
    title: str
    summary: str
    content: str
    excerpt: str | None = None
    image: str | None = None
    author_id: UUID | None = None
    author_name: str = "Anonymous"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    likes: int = 0
    liked: bool = False


class FeedResponse(BaseModel):
    items: list[FeedPostResponse]


class LikeToggleResponse(BaseModel):
    """Local like state for one post after a toggle attempt."""

    post_id: UUID
    liked: bool
    likes: int
    like_label: str
    applied: bool
    error: str | None = None
