"""Session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import Request, Response

from troq.core.config import get_settings

SESSION_COOKIE_NAME = "session"


@dataclass
class _SessionRecord:
    user_id: str
    expires_at: datetime


class SessionStore:
    """In-memory token -> user id map with sliding expiry."""

    def __init__(self, *, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else get_settings().session_ttl_seconds
        self._ttl = timedelta(seconds=max(60, ttl))
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def cookie_max_age(self) -> int:
        return int(self._ttl.total_seconds())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _sweep(self, now: datetime) -> None:
        expired = [token for token, record in self._sessions.items() if record.expires_at <= now]
        for token in expired:
            del self._sessions[token]

    def issue(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        now = self._now()
        with self._lock:
            self._sweep(now)
            self._sessions[token] = _SessionRecord(user_id=user_id, expires_at=now + self._ttl)
        return token

    def resolve(self, token: str | None) -> Optional[str]:
        if not token:
            return None
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(token, None)
                return None
            record.expires_at = now + self._ttl
            return record.user_id

    def delete(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


def session_token(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, token: str, max_age: int) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
