"""Convenience exports for ORM models."""
from .post import Like, Post
from .profile import Profile
from .user import User

__all__ = [
    "Like",
    "Post",
    "Profile",
    "User",
]
