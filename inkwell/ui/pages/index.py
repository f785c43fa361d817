"""Public landing feed."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ...backend import BackendClient, Identity, get_backend
from ...services import get_optional_identity, load_feed, serialize_post
from ..template_helpers import render_template

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def landing(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> HTMLResponse:
    """Every post newest first, with its author's name and picture."""

    snapshot = await load_feed(backend, None, with_authors=True)
    return render_template(
        request,
        "index.html",
        {
            "page_title": "Welcome",
            "active_nav": "/",
            "posts": [serialize_post(post) for post in snapshot.posts],
        },
        identity=identity,
    )
