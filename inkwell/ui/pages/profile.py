"""Profile page for the signed-in user."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, Response

from ...backend import BackendClient, Identity, get_backend
from ...services import ImageUpload, ProfileDraft, get_optional_identity, load_profile, update_profile
from ...services.profile_service import PROFILE_UPDATED
from ...services.session_service import AUTH_ROUTE
from ..template_helpers import redirect, render_template
from ..toasts import Toast

router = APIRouter()


@router.get("/profile", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    result = await load_profile(backend, identity)
    context = {
        "page_title": "Profile",
        "active_nav": "/profile",
        "profile": result.value or {"email": identity.email},
    }
    if not result.ok:
        context["toast"] = Toast(result.error or "", tone="error", title="Error")
    return render_template(request, "profile.html", context, identity=identity)


@router.post("/profile")
async def profile_submit(
    name: str = Form(...),
    phone: str = Form(""),
    bio: str = Form(""),
    profile_image: UploadFile | None = File(None),
    backend: BackendClient = Depends(get_backend),
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is None:
        return redirect(AUTH_ROUTE)

    draft = ProfileDraft(name=name, phone=phone, bio=bio)
    result = await update_profile(backend, identity, draft, ImageUpload.from_upload(profile_image))
    if not result.ok:
        return redirect("/profile", toast=result.error, tone="error", title="Error")
    return redirect("/profile", toast=PROFILE_UPDATED, title="Success")
