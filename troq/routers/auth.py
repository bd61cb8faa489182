from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from troq.core.rate_limiter import rate_limit_ip
from troq.repositories import DuplicateEmailError
from troq.routers.deps import get_account_service, get_auth_service, get_sessions, optional_user_id
from troq.services.account_service import AccountService
from troq.services.auth_service import AuthService
from troq.services.errors import InvalidCredentialsError, ValidationError
from troq.services.session_service import (
    SessionStore,
    clear_session_cookie,
    session_token,
    set_session_cookie,
)

router = APIRouter(tags=["auth"])


@router.get("/api/auth/status")
def auth_status(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
):
    user_id = optional_user_id(request)
    user = accounts.get_account(user_id) if user_id else None
    if not user:
        return {"logged_in": False}
    return {"logged_in": True, "user": user}


@router.post("/register", status_code=201)
def register(
    request: Request,
    payload: dict,
    auth: AuthService = Depends(get_auth_service),
):
    rate_limit_ip(request, "auth:register", limit=10, window_seconds=300)
    try:
        user_id = auth.register(payload.get("fullname", ""), payload.get("email", ""), payload.get("password", ""))
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
    except DuplicateEmailError:
        raise HTTPException(409, "This e-mail is already in use.")
    return {"message": "User registered successfully!", "id": user_id}


@router.post("/login")
def login(
    request: Request,
    payload: dict,
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionStore = Depends(get_sessions),
):
    rate_limit_ip(request, "auth:login", limit=10, window_seconds=300)
    try:
        user = auth.login(payload.get("email", ""), payload.get("password", ""))
    except InvalidCredentialsError as exc:
        raise HTTPException(401, exc.message)
    token = sessions.issue(user["id"])
    response = JSONResponse({"message": "Login successful!", "user": user})
    set_session_cookie(response, token, sessions.cookie_max_age)
    return response


@router.get("/logout")
def logout(request: Request, sessions: SessionStore = Depends(get_sessions)):
    sessions.delete(session_token(request))
    response = RedirectResponse("/", status_code=303)
    clear_session_cookie(response)
    return response
