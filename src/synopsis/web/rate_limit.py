"""Per-client sliding window rate limiting."""

import math
import time
from collections import defaultdict
from collections.abc import Callable
from typing import NamedTuple

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from synopsis.web.error_handlers import create_json_error_response

logger = structlog.get_logger(__name__)


class WindowState(NamedTuple):
    """Outcome of one request against a client's window."""

    allowed: bool
    remaining: int
    reset_after: float  # seconds until the oldest counted request leaves the window


class SlidingWindow:
    """Request timestamps per client key, kept only for the last `window` seconds."""

    def __init__(self, max_requests: int, window: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._hits: dict[str, list[float]] = defaultdict(list)

    def hit(self, key: str) -> WindowState:
        """Record a request for `key` unless the window is already full.

        Rejected requests are not counted, so they never extend a block.
        """
        now = self._clock()
        window_start = now - self.window
        hits = [ts for ts in self._hits[key] if ts > window_start]

        allowed = len(hits) < self.max_requests
        if allowed:
            hits.append(now)
        self._hits[key] = hits

        reset_after = hits[0] + self.window - now if hits else self.window
        return WindowState(allowed, max(self.max_requests - len(hits), 0), reset_after)

    def prune(self) -> int:
        """Drop clients with no requests inside the window, return how many were dropped."""
        window_start = self._clock() - self.window
        inactive = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in inactive:
            del self._hits[key]
        return len(inactive)

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answers 429 once a client exceeds `max_requests` within `window_seconds`.

    Every limited response carries the standard ``RateLimit-*`` headers.
    Counters live in process memory, so the limit is per worker.
    """

    EXCLUDED_PATHS = frozenset({"/health"})
    PRUNE_THRESHOLD = 1000

    def __init__(self, app: ASGIApp, max_requests: int, window_seconds: int) -> None:
        super().__init__(app)
        self.window = SlidingWindow(max_requests, window_seconds)
        self.policy = f"{max_requests};w={window_seconds}"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        state = self.window.hit(client_ip)
        headers = {
            "RateLimit-Policy": self.policy,
            "RateLimit-Limit": str(self.window.max_requests),
            "RateLimit-Remaining": str(state.remaining),
            "RateLimit-Reset": str(math.ceil(state.reset_after)),
        }

        if not state.allowed:
            seconds = max(math.ceil(state.reset_after), 1)
            logger.warning("rate_limit_exceeded", client=client_ip, retry_after=seconds)
            return create_json_error_response(
                status_code=429,
                message=f"Too many requests. Please wait {seconds} seconds before retrying.",
                error_type="rate_limit_exceeded",
                headers={**headers, "Retry-After": str(seconds)},
            )

        if len(self.window) > self.PRUNE_THRESHOLD:
            self.window.prune()

        response = await call_next(request)
        response.headers.update(headers)
        return response
