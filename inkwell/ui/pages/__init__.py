"""Export page routers for composition."""
from __future__ import annotations

from . import auth, dashboard, home, index, posts, profile

__all__ = [
    "auth",
    "dashboard",
    "home",
    "index",
    "posts",
    "profile",
]
