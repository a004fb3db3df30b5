from __future__ import annotations

import threading
import time
from typing import Dict, Tuple

from fastapi import HTTPException, Request


class RateLimiter:
    """Fixed-window hit counter keyed by scope + client IP."""

    def __init__(self, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> None:
        now = time.time()
        with self._lock:
            count, reset = self._hits.get(key, (0, now + self.window_seconds))
            if now > reset:
                count = 0
                reset = now + self.window_seconds
            count += 1
            self._hits[key] = (count, reset)
            if count > self.limit:
                raise HTTPException(429, "Demasiadas solicitudes. Intenta de nuevo en unos instantes.")


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request) -> None:
    """Global dependency; each app keeps its own limiter on ``app.state``."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None or limiter.limit <= 0:
        return
    limiter.check(f"global:{_client_ip(request)}")
