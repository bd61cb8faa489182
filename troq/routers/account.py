from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from troq.repositories import DuplicateEmailError, NotFoundError
from troq.routers.deps import (
    current_user_id,
    get_account_service,
    get_auth_service,
    get_sessions,
    to_upload,
)
from troq.services.account_service import AccountService
from troq.services.auth_service import AuthService
from troq.services.errors import ValidationError
from troq.services.session_service import SessionStore, clear_session_cookie, session_token

router = APIRouter(prefix="/api", tags=["account"])


@router.get("/account")
def get_account(
    request: Request,
    user_id: str = Depends(current_user_id),
    accounts: AccountService = Depends(get_account_service),
    sessions: SessionStore = Depends(get_sessions),
):
    user = accounts.get_account(user_id)
    if not user:
        # stale session for a user that no longer exists
        sessions.delete(session_token(request))
        response = JSONResponse({"detail": "User not found, session closed."}, status_code=404)
        clear_session_cookie(response)
        return response
    return {key: user.get(key) for key in ("id", "fullname", "email", "avatar_url")}


@router.put("/account")
def update_account(
    fullname: str = Form(""),
    email: str = Form(""),
    profile_pic: Optional[UploadFile] = File(None, alias="profilePic"),
    user_id: str = Depends(current_user_id),
    accounts: AccountService = Depends(get_account_service),
):
    try:
        user = accounts.update_account(user_id, fullname, email, to_upload(profile_pic))
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
    except DuplicateEmailError:
        raise HTTPException(409, "This e-mail is already in use by another account.")
    except NotFoundError:
        raise HTTPException(404, "User not found.")
    return {"message": "Profile updated successfully!", "user": user}


@router.post("/account/change-password")
def change_password(
    payload: dict,
    user_id: str = Depends(current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.change_password(user_id, payload.get("currentPassword", ""), payload.get("newPassword", ""))
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
    except NotFoundError:
        raise HTTPException(404, "User not found.")
    return {"message": "Password changed successfully!"}


@router.get("/users")
def search_users(
    search: Optional[str] = None,
    user_id: str = Depends(current_user_id),
    accounts: AccountService = Depends(get_account_service),
):
    try:
        return accounts.search_users(search)
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
