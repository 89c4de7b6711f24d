"""
Per-client request rate limiting
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Callable, Deque, Dict, Tuple
import logging

from quizmaster.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window limiter keeping request timestamps in memory

    Each window is (label, seconds, limit). A request is rejected when any
    window is full; rejected requests are not counted.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        clock: Callable[[], float] = time.monotonic
    ):
        self.windows: Tuple[Tuple[str, int, int], ...] = (
            ("minute", 60, requests_per_minute),
            ("hour", 3600, requests_per_hour),
        )
        self.clock = clock
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def client_id(self, request: Request) -> str:
        """User id when the request carries one, otherwise the client address"""
        user_id = getattr(request.state, "user_id", None)
        if user_id:
            return str(user_id)
        return request.client.host if request.client else "unknown"

    def hit(self, client_id: str) -> None:
        """
        Count one request for `client_id`

        Raises:
            HTTPException: 429 with retry_after when a window is full
        """
        now = self.clock()
        self._cleanup_old_entries(now)
        stamps = self.history[client_id]

        for label, seconds, limit in self.windows:
            in_window = [ts for ts in stamps if ts > now - seconds]
            if len(in_window) >= limit:
                retry_after = max(1, int(in_window[0] + seconds - now) + 1)
                logger.warning(f"Rate limit exceeded ({label}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {label}",
                        "retry_after": retry_after
                    }
                )

        stamps.append(now)

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the longest window, and clients left with none"""
        cutoff = now - max(seconds for _, seconds, _ in self.windows)

        for client_id in list(self.history.keys()):
            stamps = self.history[client_id]
            while stamps and stamps[0] <= cutoff:
                stamps.popleft()

            # Remove empty entries
            if not stamps:
                del self.history[client_id]

    async def check_rate_limit(self, request: Request) -> None:
        self.hit(self.client_id(request))


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
