from __future__ import annotations

import time
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from modules.unitconvert.core.convert import utc_timestamp
from modules.unitconvert.core.units import CATEGORIES
from modules.unitconvert.tool.routers.category_router import router as category_router
from modules.unitconvert.tool.routers.conversion_router import router as conversion_router
from modules.unitconvert.tool.routers.favorites_router import router as favorites_router
from universe.errors import ValidationNormalizeMiddleware, install_error_handlers
from universe.limits import RequestLimitsMiddleware
from universe.logger import setup_logger
from universe.rate_limit import RateLimiter, rate_limit_middleware
from universe.settings import Settings, get_settings

BASE_DIR = Path(__file__).parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logger(settings.log_level, json_logs=settings.log_json)
    logger = structlog.get_logger(__name__)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    install_error_handlers(app)

    if settings.rate_limit_enabled:
        limiter = RateLimiter(
            settings.rate_limit_requests, settings.rate_limit_window_seconds
        )
        app.state.rate_limiter = limiter
        app.middleware("http")(
            rate_limit_middleware(
                limiter, trust_forwarded=settings.rate_limit_trust_forwarded
            )
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(ValidationNormalizeMiddleware)
    app.add_middleware(
        RequestLimitsMiddleware,
        max_body=settings.max_body_bytes,
        timeout_seconds=settings.request_timeout_seconds,
    )

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": settings.app_name,
                "categories": list(CATEGORIES.values()),
            },
        )

    @app.get("/api/health")
    def health():
        return {
            "status": "OK",
            "timestamp": utc_timestamp(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "environment": settings.env,
            "version": settings.app_version,
        }

    app.include_router(category_router)
    app.include_router(conversion_router)
    app.include_router(favorites_router)

    logger.info(
        "app_created",
        env=settings.env,
        version=settings.app_version,
        categories=len(CATEGORIES),
        rate_limit=settings.rate_limit_enabled,
    )
    return app


app = create_app()
