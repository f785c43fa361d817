"""Post detail, create and edit pages."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, Response

from ...backend import BackendClient, Identity, get_backend
from ...services import (
    ImageUpload,
    PostDraft,
    create_post,
    get_optional_identity,
    load_post,
    load_post_for_edit,
    serialize_post,
    update_post,
)
from ...services.post_service import POST_CREATED, POST_UPDATED
from ...services.session_service import AUTH_ROUTE
from ..template_helpers import redirect, render_template
from ..toasts import Toast

router = APIRouter()


def _form_page(
    request: Request,
    template_name: str,
    *,
    identity: Identity,
    values: dict,
    error: str | None = None,
    post_id: str | None = None,
):
    context = {
        "page_title": "Edit Post" if post_id else "Create New Post",
        "active_nav": None if post_id else "/create-post",
        "values": values,
        "post_id": post_id,
        "submit_label": "Update Post" if post_id else "Publish Post",
    }
    if error:
        context["toast"] = Toast(error, tone="error", title="Error")
    return render_template(request, template_name, context, identity=identity, status_code=400 if error else 200)


@router.get("/post/{post_id}", response_class=HTMLResponse)
async def post_detail(
    request: Request,
    post_id: str,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    result = await load_post(backend, post_id)
    if not result.ok or result.value is None:
        return redirect(result.redirect_to or "/")

    post = serialize_post(result.value)
    return render_template(
        request,
        "post_detail.html",
        {
            "page_title": post["title"],
            "post": post,
            "is_author": identity is not None and post["author_id"] == str(identity.id),
        },
        identity=identity,
    )


@router.get("/create-post", response_class=HTMLResponse)
async def create_post_page(
    request: Request,
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)
    return _form_page(request, "create_post.html", identity=identity, values={})


@router.post("/create-post")
async def create_post_submit(
    request: Request,
    title: str = Form(...),
    content: str = Form(...),
    excerpt: str = Form(""),
    image: UploadFile | None = File(None),
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    draft = PostDraft(title=title, content=content, excerpt=excerpt)
    result = await create_post(backend, identity, draft, ImageUpload.from_upload(image))
    if not result.ok:
        values = {"title": title, "content": content, "excerpt": excerpt}
        return _form_page(request, "create_post.html", identity=identity, values=values, error=result.error)

    return redirect(result.redirect_to or "/dashboard", toast=POST_CREATED, title="Success!")


@router.get("/edit-post/{post_id}", response_class=HTMLResponse)
async def edit_post_page(
    request: Request,
    post_id: str,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    result = await load_post_for_edit(backend, identity, post_id)
    if not result.ok or result.value is None:
        return redirect(result.redirect_to or "/dashboard", toast=result.error, tone="error", title="Error")

    post = result.value
    values = {
        "title": post.get("title") or "",
        "content": post.get("content") or "",
        "excerpt": post.get("excerpt") or "",
        "image": post.get("image"),
    }
    return _form_page(request, "edit_post.html", identity=identity, values=values, post_id=post_id)


@router.post("/edit-post/{post_id}")
async def edit_post_submit(
    request: Request,
    post_id: str,
    title: str = Form(...),
    content: str = Form(...),
    excerpt: str = Form(""),
    remove_image: bool = Form(False),
    image: UploadFile | None = File(None),
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    draft = PostDraft(title=title, content=content, excerpt=excerpt)
    result = await update_post(
        backend, identity, post_id, draft, ImageUpload.from_upload(image), remove_image=remove_image
    )
    if not result.ok:
        if result.redirect_to:
            return redirect(result.redirect_to, toast=result.error, tone="error", title="Error")
        values = {"title": title, "content": content, "excerpt": excerpt}
        return _form_page(
            request, "edit_post.html", identity=identity, values=values, error=result.error, post_id=post_id
        )

    return redirect(result.redirect_to or "/dashboard", toast=POST_UPDATED, title="Success")
