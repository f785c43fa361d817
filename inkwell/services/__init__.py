"""Service layer for the blog: sessions, feeds, likes, posts and profiles."""

from .feed_cache import FeedState, FeedStateStore, feed_states, get_feed_state_store
from .feed_service import FeedSnapshot, load_author_posts, load_feed, load_post, serialize_post
from .like_service import ToggleOutcome, toggle_like, toggle_like_for_viewer
from .media_service import ImageUpload
from .post_service import PostDraft, create_post, load_post_for_edit, update_post
from .profile_service import ProfileDraft, load_profile, update_profile
from .results import FlowResult
from .session_service import (
    clear_session_cookie,
    get_optional_identity,
    resolve_identity,
    set_session_cookie,
)

__all__ = [
    "FeedSnapshot",
    "FeedState",
    "FeedStateStore",
    "FlowResult",
    "ImageUpload",
    "PostDraft",
    "ProfileDraft",
    "ToggleOutcome",
    "clear_session_cookie",
    "create_post",
    "feed_states",
    "get_feed_state_store",
    "get_optional_identity",
    "load_author_posts",
    "load_feed",
    "load_post",
    "load_post_for_edit",
    "load_profile",
    "resolve_identity",
    "serialize_post",
    "set_session_cookie",
    "toggle_like",
    "toggle_like_for_viewer",
    "update_post",
    "update_profile",
]
