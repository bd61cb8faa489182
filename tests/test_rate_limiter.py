from __future__ import annotations

import pytest
from fastapi import HTTPException

from troq.core.rate_limiter import TOO_MANY_REQUESTS, _RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_blocks_after_limit_until_window_resets():
    clock = FakeClock()
    limiter = _RateLimiter(clock)
    for _ in range(3):
        limiter.check("auth:login:1.2.3.4", 3, 60)
    with pytest.raises(HTTPException) as exc:
        limiter.check("auth:login:1.2.3.4", 3, 60)
    assert exc.value.status_code == 429
    assert exc.value.detail == TOO_MANY_REQUESTS

    # other clients keep their own window
    limiter.check("auth:login:5.6.7.8", 3, 60)

    clock.now += 61
    limiter.check("auth:login:1.2.3.4", 3, 60)


def test_expired_windows_are_evicted():
    clock = FakeClock()
    limiter = _RateLimiter(clock)
    for n in range(50):
        limiter.check(f"auth:register:10.0.0.{n}", 10, 60)
    assert len(limiter) == 50

    clock.now += 61
    limiter.check("auth:register:10.0.1.1", 10, 60)
    assert len(limiter) == 1
