import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from attendance_api.utils.rate_limiter import InMemoryRateLimiter, api_rate_limiter

logger = logging.getLogger(__name__)

class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware"""

    # Routes that don't require rate limiting
    EXEMPT_ROUTES = [
        "/health",
        "/api/docs",
        "/api/redoc",
        "/api/openapi.json"
    ]

    def __init__(self, app, limiter: InMemoryRateLimiter = api_rate_limiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/" or any(request.url.path.startswith(route) for route in self.EXEMPT_ROUTES):
            return await call_next(request)

        if await self.limiter.is_rate_limited(request):
            retry_after = await self.limiter.retry_after(request)
            # HTTPException is not converted to a response inside BaseHTTPMiddleware
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"success": False, "error": "Too many requests, please try again later."},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
