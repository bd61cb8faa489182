"""Request-scoped helpers shared by the routers."""
from __future__ import annotations

from fastapi import HTTPException, Request, UploadFile

from troq.services.account_service import AccountService
from troq.services.auth_service import AuthService
from troq.services.media_service import Upload
from troq.services.offer_service import OfferService
from troq.services.session_service import SessionStore, session_token


def _state_attr(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured")
    return value


def get_sessions(request: Request) -> SessionStore:
    return _state_attr(request, "sessions")


def get_auth_service(request: Request) -> AuthService:
    return _state_attr(request, "auth_service")


def get_account_service(request: Request) -> AccountService:
    return _state_attr(request, "account_service")


def get_offer_service(request: Request) -> OfferService:
    return _state_attr(request, "offer_service")


def optional_user_id(request: Request) -> str | None:
    return get_sessions(request).resolve(session_token(request))


def current_user_id(request: Request) -> str:
    """Dependency for protected routes: the session's user id or 401."""
    user_id = optional_user_id(request)
    if not user_id:
        raise HTTPException(401, "Authentication required.")
    return user_id


def to_upload(file: UploadFile | None) -> Upload | None:
    if file is None or not file.filename:
        return None
    content = file.file.read()
    if not content:
        return None
    return Upload(filename=file.filename, content=content, content_type=file.content_type or "application/octet-stream")
