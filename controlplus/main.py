"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
No business logic here. See controlplus.core.lifespan and
controlplus.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from controlplus.api.v1 import api_router
from controlplus.application.services.permission_gate import PageGuardRegistry
from controlplus.core.config import get_settings
from controlplus.core.exception_handlers import register_exception_handlers
from controlplus.core.lifespan import create_lifespan
from controlplus.core.limiter import limiter
from controlplus.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from controlplus.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Per-account page guards (warning dedup survives across requests).
    app.state.page_guards = PageGuardRegistry(settings.default_page, settings.page_guard_max_accounts)

    # Middleware: first added = innermost. Order: request ID -> security -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
