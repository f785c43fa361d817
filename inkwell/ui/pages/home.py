"""Home feed with like toggles."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ...backend import BackendClient, Identity, get_backend
from ...services import FeedStateStore, get_feed_state_store, get_optional_identity, load_feed, serialize_post
from ..template_helpers import render_template

router = APIRouter()


@router.get("/home", response_class=HTMLResponse)
async def home(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
    store: FeedStateStore = Depends(get_feed_state_store),
) -> HTMLResponse:
    snapshot = await load_feed(backend, identity)
    if identity is not None:
        store.put(identity.id, snapshot.state)

    return render_template(
        request,
        "home.html",
        {
            "page_title": "Latest Blog Posts",
            "active_nav": "/home",
            "posts": [serialize_post(post, snapshot.state) for post in snapshot.posts],
            "can_like": identity is not None,
        },
        identity=identity,
    )
