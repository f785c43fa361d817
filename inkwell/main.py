"""Application entry point for the blogging web app."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import init_db
from .routers import auth_router, posts_router
from .ui import router as ui_router
from .ui.template_helpers import render_template

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ui_router)
app.include_router(auth_router)
app.include_router(posts_router)

UI_STATIC_ROOT = Path(__file__).resolve().parent / "ui" / "static"
app.mount("/assets", StaticFiles(directory=str(UI_STATIC_ROOT), check_dir=False), name="assets")


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the database schema exists before serving."""

    try:
        init_db()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Database initialisation failed")
        raise
    logger.info("%s %s ready", APP_NAME, API_VERSION)


@app.exception_handler(StarletteHTTPException)
async def _not_found_handler(request: Request, exc: StarletteHTTPException):
    """Unknown pages get the not-found view; API errors stay JSON."""

    if exc.status_code != 404 or request.url.path.startswith("/api"):
        return await http_exception_handler(request, exc)

    logger.info("404 for %s", request.url.path)
    # Rendered without an identity lookup; the navbar shows the signed-out links.
    return render_template(request, "not_found.html", {"page_title": "Page not found"}, status_code=404)


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
