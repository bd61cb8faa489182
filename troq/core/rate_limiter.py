"""Fixed-window request limits for the credential endpoints (``/login``, ``/register``)."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests. Try again shortly."


@dataclass
class _Window:
    count: int
    resets_at: float


class _RateLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if window.resets_at <= now]
        for key in expired:
            del self._windows[key]

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            window = self._windows.setdefault(key, _Window(count=0, resets_at=now + window_seconds))
            window.count += 1
            if window.count > limit:
                logger.warning("Rate limit hit for %s", key)
                raise HTTPException(429, TOO_MANY_REQUESTS)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


_limiter = _RateLimiter()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    _limiter.check(f"{scope}:{_client_ip(request)}", limit, window_seconds)


def reset_limits() -> None:
    """Forget every recorded hit (used by tests)."""
    _limiter.reset()
