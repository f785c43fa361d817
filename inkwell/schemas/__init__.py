"""Pydantic schemas exposed by the JSON API."""

from .auth import AuthResponse, SignInRequest, SignUpRequest
from .posts import FeedPostResponse, FeedResponse, LikeToggleResponse

__all__ = [
    "AuthResponse",
    "FeedPostResponse",
    "FeedResponse",
    "LikeToggleResponse",
    "SignInRequest",
    "SignUpRequest",
]
