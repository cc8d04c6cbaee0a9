import time
import logging
from typing import Dict
from collections import defaultdict, deque
from fastapi import Request
import asyncio

from attendance_api.core.config import settings

logger = logging.getLogger(__name__)

class InMemoryRateLimiter:
    """In-memory sliding-window rate limiter keyed by client"""

    def __init__(self, max_attempts: int = 100, window_seconds: int = 900):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._requests: Dict[str, deque] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._last_cleanup = time.time()
        self._cleanup_interval = 60  # Cleanup every 60 seconds

    async def _cleanup_old_entries(self):
        """Remove old entries to prevent memory leaks"""
        current_time = time.time()

        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        cutoff_time = current_time - self.window_seconds
        keys_to_remove = []

        for key, timestamps in self._requests.items():
            while timestamps and timestamps[0] <= cutoff_time:
                timestamps.popleft()
            if not timestamps:
                keys_to_remove.append(key)

        for key in keys_to_remove:
            del self._requests[key]

        self._last_cleanup = current_time

        if keys_to_remove:
            logger.debug(f"Cleaned up {len(keys_to_remove)} rate limit entries")

    async def check_rate_limit(self, key: str) -> bool:
        """Record one request; False when the key is over its limit"""
        async with self._lock:
            current_time = time.time()
            cutoff_time = current_time - self.window_seconds

            timestamps = self._requests[key]
            while timestamps and timestamps[0] <= cutoff_time:
                timestamps.popleft()

            if len(timestamps) >= self.max_attempts:
                logger.warning(f"Rate limit exceeded for key: {key}")
                return False

            timestamps.append(current_time)
            await self._cleanup_old_entries()
            return True

    async def is_rate_limited(self, request: Request, identifier: str = None) -> bool:
        if not identifier:
            identifier = get_client_ip(request)
        return not await self.check_rate_limit(f"rate_limit:{identifier}")

    async def retry_after(self, request: Request) -> int:
        """Seconds until the oldest request of this client leaves the window"""
        key = f"rate_limit:{get_client_ip(request)}"
        async with self._lock:
            timestamps = self._requests.get(key)
            if not timestamps:
                return 0
            return max(int(timestamps[0] + self.window_seconds - time.time()), 0)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


api_rate_limiter = InMemoryRateLimiter(
    max_attempts=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)
