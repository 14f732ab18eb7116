"""
Fixed-window rate limiting for the public API.

Counts requests per client address inside a window of
``RATE_LIMIT_WINDOW_MS``; once ``RATE_LIMIT_MAX_REQUESTS`` is reached the
client gets 429 until the window expires. Counters live in process memory.
"""

import logging
import math
import time
from typing import Callable, Dict, Tuple

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.intake import get_client_info
from app.models.common import UNKNOWN

logger = logging.getLogger(__name__)

# Expired windows are swept once this many clients are tracked
PRUNE_THRESHOLD = 10000


class FixedWindowLimiter:
    def __init__(self, window_ms: int, max_requests: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_ms / 1000
        self.max_requests = max_requests
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def check(self, identifier: str) -> Tuple[bool, int]:
        """
        Count one request for ``identifier``.

        Returns:
            tuple: (is_allowed, retry_after_seconds)
        """
        now = self.clock()
        window_start, count = self._windows.get(identifier, (now, 0))

        # Reset the window once it has expired
        if now - window_start >= self.window_seconds:
            window_start, count = now, 0

        if count >= self.max_requests:
            retry_after = self.window_seconds - (now - window_start)
            return False, max(1, math.ceil(retry_after))

        self._windows[identifier] = (window_start, count + 1)
        if len(self._windows) > PRUNE_THRESHOLD:
            self._prune(now)
        return True, 0

    def _prune(self, now: float):
        expired = [key for key, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]


def rate_limit_key(request, trust_proxy: bool = False) -> str:
    """
    Address a request is counted against.

    X-Forwarded-For is set by the client unless a proxy rewrites it, so it is
    only honoured when TRUST_PROXY says one sits in front of the app.
    """
    if trust_proxy:
        return get_client_info(request).ipAddress
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: FixedWindowLimiter, path_prefix: str = "/api", trust_proxy: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix
        self.trust_proxy = trust_proxy

    async def dispatch(self, request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = rate_limit_key(request, self.trust_proxy)
        allowed, retry_after = self.limiter.check(client_ip)
        if not allowed:
            logger.warning(f"⚠️ Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": "Too many requests from this IP, please try again later."},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
