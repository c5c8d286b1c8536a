"""Per-client request throttling for the credential endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict
import math
import threading
import time

from fastapi import HTTPException, Request


@dataclass
class _Window:
    resets_at: float
    hits: int = 0


class RateLimiter:
    """
    Fixed-window hit counter keyed by arbitrary strings.

    Windows that have ended are dropped on the next check, so the table only
    holds keys seen during their current window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._next_sweep = math.inf
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        self._windows = {key: w for key, w in self._windows.items() if w.resets_at > now}
        self._next_sweep = min((w.resets_at for w in self._windows.values()), default=math.inf)

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            window = self._windows.get(key)
            if window is None:
                window = self._windows[key] = _Window(resets_at=now + window_seconds)
                self._next_sweep = min(self._next_sweep, window.resets_at)
            window.hits += 1
            if window.hits > limit:
                raise HTTPException(429, "Too many requests. Try again shortly.")

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._next_sweep = math.inf


_limiter = RateLimiter()


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
    _limiter.reset()
