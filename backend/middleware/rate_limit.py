"""
In-memory rate limiting for the checkout backend.

Token requests trigger a call to the payment gateway, so they are limited
per client IP with a sliding-window counter. Routes that reach the same
gateway call share one bucket through a common scope name. For multi-worker
deployments, replace with a shared (e.g. Redis-backed) limiter.
"""
import time
import logging
from collections import defaultdict
from typing import Optional

from fastapi import Request, Response

from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window counter keyed by "<client>:<scope>".

    Only accepted requests are recorded, so a client that keeps hammering
    while blocked is let back in once its oldest accepted hit ages out.
    """

    def __init__(self):
        self._hits: dict[str, list[float]] = defaultdict(list)

    def _window(self, key: str, window_seconds: int) -> list[float]:
        cutoff = time.time() - window_seconds
        hits = [ts for ts in self._hits[key] if ts > cutoff]
        self._hits[key] = hits
        return hits

    def hit(self, key: str, max_requests: int, window_seconds: int) -> Optional[int]:
        """
        Record one request for key.

        Returns:
            Requests left in the window after this one, or None if the
            request is over the limit (nothing is recorded then)
        """
        hits = self._window(key, window_seconds)
        if len(hits) >= max_requests:
            return None
        hits.append(time.time())
        return max_requests - len(hits)

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        return max(0, max_requests - len(self._window(key, window_seconds)))

    def reset(self):
        self._hits.clear()


# Global rate limiter instance
_limiter = RateLimiter()


def rate_limit(max_requests: int = 10, window_seconds: int = 60, scope: Optional[str] = None):
    """
    FastAPI dependency factory for rate limiting.

    scope names the bucket; routes given the same scope share one quota.
    Without a scope each URL path is limited on its own.

    Usage:
        token_limit = rate_limit(10, 60, scope="token")

        @router.post("/token")
        async def request_token(_=Depends(token_limit)):
            ...
    """
    async def _check_rate_limit(request: Request, response: Response):
        client_ip = request.client.host if request.client else "unknown"
        bucket = scope or request.url.path
        key = f"{client_ip}:{bucket}"

        remaining = _limiter.hit(key, max_requests, window_seconds)
        if remaining is None:
            logger.warning(
                f"Rate limit exceeded: {client_ip} on {bucket} "
                f"({max_requests}/{window_seconds}s)"
            )
            raise RateLimitError(
                f"Rate limit exceeded. Maximum {max_requests} requests "
                f"per {window_seconds} seconds. Try again later.",
                headers={
                    "Retry-After": str(window_seconds),
                    "X-RateLimit-Limit": str(max_requests),
                },
            )

        response.headers["X-RateLimit-Limit"] = str(max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)

    return _check_rate_limit
