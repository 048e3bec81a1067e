"""
Per-client rate limiting for the auth endpoints.

Fixed-window counters keyed by client IP, held by a limiter instance (one per
endpoint budget) behind a lock. Windows that have ended are swept lazily so
the map does not grow without bound.

Requests over budget are short-circuited with RateLimitExceededError before
the route handler runs. Requests within budget carry RateLimit-Limit,
RateLimit-Remaining and RateLimit-Reset headers.
"""

import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

from fastapi import Depends, Request, Response

from shared.exceptions import RateLimitExceededError

from ..dependencies import get_challenge_limiter, get_connect_limiter

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int


@dataclass(frozen=True)
class RateLimitState:
    """Budget left for one key after a counted request."""

    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class FixedWindowRateLimiter:
    """
    Fixed-window request counter.

    Example:
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=900)
        limiter.hit("203.0.113.7", "Too many requests")  # raises when over budget
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Drop windows that have ended. Caller holds the lock."""
        if now - self._last_sweep < self.window_seconds:
            return
        expired = [
            key for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now

    def hit(
        self, key: str, message: str = "Too many requests, please try again later"
    ) -> RateLimitState:
        """
        Count one request for `key`.

        Returns:
            The key's remaining budget and seconds until its window resets

        Raises:
            RateLimitExceededError: If the key has used up its budget
        """
        with self._lock:
            now = self._clock()
            self._sweep(now)

            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window

            reset_after = max(1, math.ceil(window.started_at + self.window_seconds - now))
            if window.count >= self.max_requests:
                logger.debug("Rate limit exceeded for %s, retry after %ds", key, reset_after)
                raise RateLimitExceededError(
                    message, retry_after=reset_after, limit=self.max_requests
                )

            window.count += 1
            return RateLimitState(
                limit=self.max_requests,
                remaining=self.max_requests - window.count,
                reset_after=reset_after,
            )

    def remaining(self, key: str) -> int:
        """Requests left for `key` in its current window."""
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() - window.started_at >= self.window_seconds:
                return self.max_requests
            return max(0, self.max_requests - window.count)

    def tracked_keys(self) -> int:
        """Number of clients currently holding a window."""
        with self._lock:
            return len(self._windows)

    def clear(self) -> None:
        """Remove all counters."""
        with self._lock:
            self._windows.clear()


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def challenge_rate_limit(
    request: Request,
    response: Response,
    limiter: FixedWindowRateLimiter = Depends(get_challenge_limiter),
) -> None:
    """Dependency enforcing the challenge-issuance budget."""
    state = limiter.hit(
        _client_key(request),
        "Too many challenge requests from this IP, please try again later",
    )
    response.headers.update(state.headers())


def connect_rate_limit(
    request: Request,
    response: Response,
    limiter: FixedWindowRateLimiter = Depends(get_connect_limiter),
) -> None:
    """Dependency enforcing the (stricter) authentication budget."""
    state = limiter.hit(
        _client_key(request),
        "Too many authentication attempts from this IP, please try again later",
    )
    response.headers.update(state.headers())
