from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from boxoffice.core.config import Settings, get_settings
from boxoffice.domain.errors import StoreError
from boxoffice.repositories.json_storage import DocumentStore
from boxoffice.routers import auth as auth_router
from boxoffice.routers import events as events_router
from boxoffice.routers import users as users_router
from boxoffice.services.inventory_service import InventoryStore
from boxoffice.services.reset_delivery import email_reset_delivery
from boxoffice.services.user_service import UserStore

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.code, "message": exc.message}, status_code=exc.status_code)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (`uvicorn boxoffice.app:create_app --factory`)."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = FastAPI(title="Boxoffice API")
    app.state.settings = settings
    app.state.user_store = UserStore(
        DocumentStore(settings.users_file),
        reset_ttl_seconds=settings.password_reset_ttl,
        deliver_reset=email_reset_delivery,
    )
    app.state.inventory_store = InventoryStore(DocumentStore(settings.events_file))

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(origin for origin in allowed_cors if origin),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_exception_handler(StoreError, _store_error_handler)

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(events_router.router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    logger.info("Users file: %s, events file: %s", settings.users_file, settings.events_file)
    return app
