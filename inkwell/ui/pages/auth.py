"""Sign-in, sign-up, sign-out and the email confirmation callback."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response

from ...backend import BackendClient, Identity, get_backend
from ...services import FeedStateStore, clear_session_cookie, get_feed_state_store, get_optional_identity, set_session_cookie
from ...services.session_service import read_access_token
from ..template_helpers import redirect, render_template
from ..toasts import Toast

router = APIRouter()

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
CALLBACK_REDIRECT_SECONDS = 3


def _auth_page(request: Request, *, mode: str, error: str | None = None, email: str = "", name: str = ""):
    context = {
        "page_title": "Sign in" if mode == "sign-in" else "Create account",
        "mode": mode,
        "email": email,
        "name": name,
    }
    if error:
        context["toast"] = Toast(error, tone="error")
    return render_template(request, "auth.html", context, status_code=400 if error else 200)


@router.get("/auth", response_class=HTMLResponse)
async def auth_page(
    request: Request,
    mode: str = "sign-in",
    identity: Identity | None = Depends(get_optional_identity),
) -> Response:
    if identity is not None:
        return redirect("/home")
    return _auth_page(request, mode="sign-up" if mode == "sign-up" else "sign-in")


@router.post("/auth/sign-in")
async def sign_in(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    backend: BackendClient = Depends(get_backend),
) -> Response:
    result = await run_in_threadpool(backend.auth.sign_in_with_password, email=email, password=password)
    if result.error is not None or result.data is None:
        logger.info("Sign-in failed for %s: %s", email, result.error)
        message = result.error.message if result.error else "Sign in failed"
        return _auth_page(request, mode="sign-in", error=message, email=email)

    response = redirect("/home", toast="Welcome back!")
    set_session_cookie(response, result.data)
    return response


@router.post("/auth/sign-up")
async def sign_up(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    backend: BackendClient = Depends(get_backend),
) -> Response:
    if len(password) < MIN_PASSWORD_LENGTH:
        return _auth_page(
            request,
            mode="sign-up",
            error=f"Password should be at least {MIN_PASSWORD_LENGTH} characters",
            email=email,
            name=name,
        )

    result = await run_in_threadpool(backend.auth.sign_up, email=email, password=password, name=name)
    if result.error is not None or result.data is None:
        message = result.error.message if result.error else "Sign up failed"
        return _auth_page(request, mode="sign-up", error=message, email=email, name=name)

    logger.info("Registered user %s", result.data.user.id)
    response = redirect("/home", toast="Account created successfully!")
    set_session_cookie(response, result.data)
    return response


@router.post("/auth/sign-out")
async def sign_out(
    identity: Identity | None = Depends(get_optional_identity),
    store: FeedStateStore = Depends(get_feed_state_store),
) -> Response:
    if identity is not None:
        store.discard(identity.id)
    response = redirect("/", toast="Signed out")
    clear_session_cookie(response)
    return response


@router.get("/auth/callback", response_class=HTMLResponse)
async def auth_callback(
    request: Request,
    access_token: str | None = None,
    backend: BackendClient = Depends(get_backend),
) -> HTMLResponse:
    """Confirm the session after following an email link, then head home."""

    token = access_token or read_access_token(request)
    result = await run_in_threadpool(backend.auth.get_session, token)
    confirmed = result.error is None and result.data is not None
    if not confirmed:
        logger.info("Auth callback without a valid session: %s", result.error)

    response = render_template(
        request,
        "auth_callback.html",
        {
            "page_title": "Email confirmed" if confirmed else "Verification failed",
            "confirmed": confirmed,
            "redirect_seconds": CALLBACK_REDIRECT_SECONDS,
            "toast": Toast("Email confirmed!") if confirmed else Toast("Verification failed", tone="error"),
        },
        identity=result.data.user if confirmed else None,
    )
    if confirmed and access_token:
        set_session_cookie(response, result.data)
    return response
