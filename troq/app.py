"""Application factory for the Troq marketplace API."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from troq.core.config import Settings, get_settings
from troq.core.log import configure_logging
from troq.repositories import Repository, get_repository
from troq.routers import account as account_router
from troq.routers import auth as auth_router
from troq.routers import offers as offers_router
from troq.services.account_service import AccountService
from troq.services.auth_service import AuthService
from troq.services.media_service import MediaService
from troq.services.offer_service import OfferService
from troq.services.session_service import SessionStore

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(
    settings: Settings | None = None,
    *,
    repository: Repository | None = None,
    media: MediaService | None = None,
) -> FastAPI:
    """Factory compatible with ``uvicorn --factory troq.app:create_app``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Troq Marketplace API")

    repository = repository or get_repository(settings)
    media = media or MediaService()
    app.state.settings = settings
    app.state.repository = repository
    app.state.sessions = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    app.state.auth_service = AuthService(repository)
    app.state.account_service = AccountService(repository, media)
    app.state.offer_service = OfferService(repository, media)

    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:3001", "http://127.0.0.1:3001"],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.include_router(auth_router.router)
    app.include_router(offers_router.router)
    app.include_router(account_router.router)

    logger.info("Troq API ready (env=%s, storage=%s)", settings.app_env, settings.storage_backend)
    return app
