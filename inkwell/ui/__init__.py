"""Server-rendered pages for the blog."""

from .router import router

__all__ = ["router"]
