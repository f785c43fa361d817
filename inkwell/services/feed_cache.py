"""Client-side mirrors of like state, keyed by post id.

States are immutable; every mutation returns a new :class:`FeedState`.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

DEFAULT_MAX_ENTRIES = 1024


@dataclass(frozen=True)
class FeedState:
    like_counts: Mapping[UUID, int] = field(default_factory=dict)
    liked: frozenset[UUID] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "like_counts", MappingProxyType(dict(self.like_counts)))

    def count_for(self, post_id: UUID) -> int:
        return self.like_counts.get(post_id, 0)

    def is_liked(self, post_id: UUID) -> bool:
        return post_id in self.liked

    def with_like(self, post_id: UUID, stored_count: int | None = None) -> "FeedState":
        """Mark ``post_id`` liked; adopt ``stored_count`` when the backend reported one."""

        count = stored_count if stored_count is not None else self.count_for(post_id) + 1
        return FeedState(like_counts={**self.like_counts, post_id: count}, liked=self.liked | {post_id})

    def with_unlike(self, post_id: UUID, stored_count: int | None = None) -> "FeedState":
        """Mark ``post_id`` not liked; adopt ``stored_count`` when the backend reported one."""

        count = stored_count if stored_count is not None else max(self.count_for(post_id) - 1, 0)
        return FeedState(like_counts={**self.like_counts, post_id: count}, liked=self.liked - {post_id})


class FeedStateStore:
    """Latest feed state per signed-in user.

    Holds at most ``max_entries`` users; the least recently used entry is dropped first.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._max_entries = max_entries
        self._states: OrderedDict[UUID, FeedState] = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def get(self, user_id: UUID) -> FeedState | None:
        state = self._states.get(user_id)
        if state is not None:
            self._states.move_to_end(user_id)
        return state

    def put(self, user_id: UUID, state: FeedState) -> FeedState:
        self._states[user_id] = state
        self._states.move_to_end(user_id)
        while len(self._states) > self._max_entries:
            self._states.popitem(last=False)
        return state

    def discard(self, user_id: UUID) -> None:
        self._states.pop(user_id, None)

    def clear(self) -> None:
        self._states.clear()


feed_states = FeedStateStore()


def get_feed_state_store() -> FeedStateStore:
    """FastAPI dependency returning the process-wide feed state store."""

    return feed_states


__all__ = ["FeedState", "FeedStateStore", "feed_states", "get_feed_state_store"]
