"""Utilities for rendering UI templates with shared context."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from ..backend import Identity
from ..config import get_settings
from . import components
from .toasts import clear_toast, push_toast, read_toast

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_BASE_COMPONENTS = {
    "buttons": components.buttons,
    "cards": components.cards,
    "feedback": components.feedback,
    "forms": components.forms,
    "layout": components.layout,
}


def render_template(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    identity: Identity | None = None,
    status_code: int = 200,
):
    """Return a TemplateResponse with shared UI context and any pending toast."""

    toast = read_toast(request)
    base_context: dict[str, Any] = {
        "request": request,
        "app_name": get_settings().app_name,
        "components": _BASE_COMPONENTS,
        "active_nav": None,
        "page_title": "",
        "identity": identity,
        "toast": toast,
        "now_year": datetime.now(timezone.utc).year,
    }
    if context:
        base_context.update(context)

    response = templates.TemplateResponse(request, template_name, base_context, status_code=status_code)
    if toast is not None:
        clear_toast(response)
    return response


def redirect(to: str, *, toast: str | None = None, tone: str = "success", title: str | None = None) -> RedirectResponse:
    """303 redirect, optionally carrying a toast to the next page."""

    response = RedirectResponse(to, status_code=303)
    if toast:
        push_toast(response, toast, tone=tone, title=title)
    return response


__all__ = ["redirect", "render_template", "templates"]
