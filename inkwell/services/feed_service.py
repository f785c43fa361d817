"""Loading the post feeds and single posts."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from ..backend import BackendClient, BackendResponse, Embed, Identity
from ..backend.tables import Row
from .feed_cache import FeedState
from .results import FlowResult

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
LIKES_TABLE = "likes"
AUTHOR_EMBED = Embed(table="profiles", foreign_key="author_id", columns=("name", "profile_image"))
SUMMARY_LENGTH = 150


@dataclass(frozen=True)
class FeedSnapshot:
    posts: list[Row] = field(default_factory=list)
    state: FeedState = field(default_factory=FeedState)


def summarize(post: Row) -> str:
    """The post's excerpt, or the first characters of its content."""

    excerpt = post.get("excerpt")
    if excerpt:
        return str(excerpt)
    return f"{(post.get('content') or '')[:SUMMARY_LENGTH]}..."


def like_label(count: int) -> str:
    return "Like" if count == 1 else "Likes"


def author_name(post: Row) -> str:
    author = post.get("profiles")
    if isinstance(author, dict) and author.get("name"):
        return str(author["name"])
    return "Anonymous"


def derive_feed_state(posts: Iterable[Row], like_rows: Iterable[Row]) -> FeedState:
    """Seed the local mirror from the loaded posts and the viewer's like rows."""

    counts = {post["id"]: int(post.get("likes") or 0) for post in posts}
    liked = frozenset(row["post_id"] for row in like_rows)
    return FeedState(like_counts=counts, liked=liked)


async def _no_like_rows() -> BackendResponse[list[Row]]:
    return BackendResponse.success([])


async def load_feed(
    backend: BackendClient,
    identity: Identity | None,
    *,
    with_authors: bool = False,
) -> FeedSnapshot:
    """Fetch all posts newest first together with the viewer's likes.

    Both reads run concurrently; a failed read is logged and contributes nothing.
    """

    posts_call = run_in_threadpool(
        backend.tables.select,
        POSTS_TABLE,
        order_by="created_at",
        descending=True,
        embed=AUTHOR_EMBED if with_authors else None,
    )
    if identity is not None:
        likes_call = run_in_threadpool(
            backend.tables.select,
            LIKES_TABLE,
            columns=("post_id",),
            filters={"user_id": identity.id},
        )
    else:
        likes_call = _no_like_rows()

    posts_result, likes_result = await asyncio.gather(posts_call, likes_call)

    posts: list[Row] = []
    if posts_result.error is not None:
        logger.error("Error fetching posts: %s", posts_result.error)
    else:
        posts = posts_result.data or []

    like_rows: list[Row] = []
    if likes_result.error is not None:
        logger.error("Error fetching likes: %s", likes_result.error)
    else:
        like_rows = likes_result.data or []

    return FeedSnapshot(posts=posts, state=derive_feed_state(posts, like_rows))


async def load_author_posts(backend: BackendClient, identity: Identity) -> list[Row]:
    """Posts written by ``identity``, newest first."""

    result = await run_in_threadpool(
        backend.tables.select,
        POSTS_TABLE,
        filters={"author_id": identity.id},
        order_by="created_at",
        descending=True,
    )
    if result.error is not None:
        logger.error("Error fetching posts for %s: %s", identity.id, result.error)
        return []
    return result.data or []


async def load_post(backend: BackendClient, post_id: UUID | str) -> FlowResult[Row]:
    """One post with its author; any failure sends the viewer back to the landing feed."""

    result = await run_in_threadpool(
        backend.tables.select_one,
        POSTS_TABLE,
        filters={"id": post_id},
        embed=AUTHOR_EMBED,
    )
    if result.error is not None:
        logger.error("Error fetching post %s: %s", post_id, result.error)
        return FlowResult.failure(result.error.message, redirect_to="/")
    return FlowResult.success(result.data)


def serialize_post(post: Row, state: FeedState | None = None) -> dict[str, Any]:
    """Template/JSON friendly view of a post row."""

    post_id = post["id"]
    count = state.count_for(post_id) if state is not None else int(post.get("likes") or 0)
    return {
        "id": str(post_id),
        "title": post.get("title") or "",
        "content": post.get("content") or "",
        "summary": summarize(post),
        "excerpt": post.get("excerpt"),
        "image": post.get("image"),
        "author_id": str(post["author_id"]) if post.get("author_id") else None,
        "author_name": author_name(post),
        "author_image": (post.get("profiles") or {}).get("profile_image"),
        "created_at": post.get("created_at"),
        "updated_at": post.get("updated_at"),
        "likes": count,
        "like_label": like_label(count),
        "liked": state.is_liked(post_id) if state is not None else False,
    }


__all__ = [
    "AUTHOR_EMBED",
    "FeedSnapshot",
    "LIKES_TABLE",
    "POSTS_TABLE",
    "author_name",
    "derive_feed_state",
    "like_label",
    "load_author_posts",
    "load_feed",
    "load_post",
    "serialize_post",
    "summarize",
]
