
import math
import time
from typing import Callable, Dict, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class RateLimiter:
    """
    In-memory rate limiter using a fixed window algorithm.
    Tracks requests per client identifier within a time window.

    State lives in the worker process; every worker counts on its own.
    """
    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # identifier -> (count, window_start_time)
        self.requests: Dict[str, Tuple[int, float]] = {}
        self._last_cleanup = clock()

    def hit(self, identifier: str) -> Tuple[bool, int, float]:
        """
        Count one request for ``identifier``.

        Returns (allowed, remaining, seconds until the window resets).
        """
        now = self._clock()
        if now - self._last_cleanup > self.window_seconds:
            self.cleanup()

        count, start_time = self.requests.get(identifier, (0, now))
        if now - start_time >= self.window_seconds:
            count, start_time = 0, now

        reset_in = max(0.0, start_time + self.window_seconds - now)
        if count >= self.max_requests:
            return False, 0, reset_in

        count += 1
        self.requests[identifier] = (count, start_time)
        return True, self.max_requests - count, reset_in

    def is_allowed(self, identifier: str) -> bool:
        return self.hit(identifier)[0]

    def cleanup(self):
        """Cleanup old entries to prevent memory leak"""
        now = self._clock()
        keys_to_delete = [k for k, v in self.requests.items() if now - v[1] >= self.window_seconds]
        for k in keys_to_delete:
            del self.requests[k]
        self._last_cleanup = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global per-client rate limiting. Requests over the limit get a 429 with
    a Retry-After header; allowed responses carry the remaining quota.
    """

    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        identifier = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.limiter.hit(identifier)

        headers = {
            "X-RateLimit-Limit": str(self.limiter.max_requests),
            "X-RateLimit-Remaining": str(remaining),
        }
        if not allowed:
            headers["Retry-After"] = str(math.ceil(reset_in))
            return JSONResponse({"detail": RATE_LIMIT_MESSAGE}, status_code=429, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
