"""The signed-in author's own posts."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from ...backend import BackendClient, Identity, get_backend
from ...services import get_optional_identity, load_author_posts, serialize_post
from ...services.session_service import AUTH_ROUTE
from ..template_helpers import redirect, render_template

router = APIRouter()


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    posts = await load_author_posts(backend, identity)
    return render_template(
        request,
        "dashboard.html",
        {
            "page_title": "Dashboard",
            "active_nav": "/dashboard",
            "posts": [serialize_post(post) for post in posts],
        },
        identity=identity,
    )
