import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from attendance_api import __version__
import attendance_api.models  # noqa: F401  registers every mapper
from attendance_api.api.v1.api import api_router
from attendance_api.core.config import settings
from attendance_api.core.exceptions import BaseAppException, UnsupportedPlatformError
from attendance_api.core.logging_config import setup_logging
from attendance_api.middleware.logging import LoggingMiddleware
from attendance_api.middleware.rate_limiting import RateLimitingMiddleware
from attendance_api.services.hr.attendance_type_resolver import resolver_stats
from attendance_api.utils.time_helper import format_timestamp, now_utc

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.AUTO_CREATE_TABLES:
        from attendance_api.db.init_db import create_tables
        await create_tables()
    logger.info(f"🔐 Relying party origin: {settings.WEBAUTHN_ORIGIN}")
    yield

# Create FastAPI app
app_config = {
    "title": "Passkey Attendance API",
    "description": "Employee attendance secured with WebAuthn platform passkeys",
    "version": __version__,
    "docs_url": "/api/docs",
    "redoc_url": "/api/redoc",
    "openapi_url": "/api/openapi.json",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware (last added runs first)
app.add_middleware(LoggingMiddleware)
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitingMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    https_only=settings.SESSION_HTTPS_ONLY,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)

# Error responses
@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    content = {"success": False, "error": exc.detail, "details": exc.errors}
    if isinstance(exc, UnsupportedPlatformError):
        content["supportedPlatforms"] = exc.supported_platforms
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Invalid request", "details": details},
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )

# Include routers
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {
        "message": "Welcome to the Passkey Attendance API",
        "status": "active",
        "version": __version__,
        "docs": "/api/docs"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": format_timestamp(now_utc()),
        "components": {
            "attendance_type_resolver": {
                "fallback_count": resolver_stats.fallback_count,
                "last_fallback_at": format_timestamp(resolver_stats.last_fallback_at),
            },
        },
    }
