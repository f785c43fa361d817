"""One-shot toast notifications carried across a redirect in a cookie."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from urllib.parse import quote, unquote

from fastapi import Request, Response

logger = logging.getLogger(__name__)

TOAST_COOKIE = "inkwell_toast"
TOAST_MAX_AGE = 60


@dataclass(frozen=True)
class Toast:
    message: str
    tone: str = "success"
    title: str | None = None


def push_toast(response: Response, message: str, *, tone: str = "success", title: str | None = None) -> Response:
    """Queue ``message`` for display on the next rendered page."""

    payload = json.dumps({"message": message, "tone": tone, "title": title})
    response.set_cookie(
        TOAST_COOKIE,
        quote(payload),
        max_age=TOAST_MAX_AGE,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return response


def read_toast(request: Request) -> Toast | None:
    raw = request.cookies.get(TOAST_COOKIE)
    if not raw:
        return None
    try:
        payload = json.loads(unquote(raw))
        return Toast(
            message=str(payload["message"]),
            tone=str(payload.get("tone") or "success"),
            title=payload.get("title"),
        )
    except (ValueError, KeyError, TypeError):
        logger.debug("Discarding malformed toast cookie")
        return None


def clear_toast(response: Response) -> None:
    response.delete_cookie(TOAST_COOKIE, path="/")


__all__ = ["TOAST_COOKIE", "Toast", "clear_toast", "push_toast", "read_toast"]
