"""Resolve the signed-in identity for a request and manage the session cookie."""
from __future__ import annotations

import logging

from fastapi import Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from ..backend import AuthSession, BackendClient, Identity, get_backend
from ..config import get_settings

logger = logging.getLogger(__name__)

AUTH_ROUTE = "/auth"


def read_access_token(request: Request) -> str | None:
    """Return the access token from the session cookie or a bearer header."""

    authorization = request.headers.get("Authorization") or ""
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    token = request.cookies.get(get_settings().session_cookie_name)
    return token or None


async def resolve_identity(request: Request, backend: BackendClient) -> Identity | None:
    token = read_access_token(request)
    if not token:
        return None

    result = await run_in_threadpool(backend.auth.get_user, token)
    if result.error is not None:
        logger.info("Ignoring session token: %s", result.error)
        return None
    return result.data


async def get_optional_identity(
    request: Request,
    backend: BackendClient = Depends(get_backend),
) -> Identity | None:
    """FastAPI dependency returning the signed-in identity, if any."""

    return await resolve_identity(request, backend)


def set_session_cookie(response: Response, session: AuthSession) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name, path="/")


__all__ = [
    "AUTH_ROUTE",
    "clear_session_cookie",
    "get_optional_identity",
    "read_access_token",
    "resolve_identity",
    "set_session_cookie",
]
