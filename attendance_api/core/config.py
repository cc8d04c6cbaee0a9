# attendance_api/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and "localhost" in v:
            raise ValueError("🚨 Production environment cannot use localhost database!")
        return v

    # === Session ===
    SESSION_SECRET: str
    SESSION_COOKIE_NAME: str = "attendance_session"
    SESSION_MAX_AGE_SECONDS: int = 86400
    SESSION_HTTPS_ONLY: bool = False

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === WebAuthn ===
    WEBAUTHN_RP_NAME: str = "African Group NG Employee Attendance System"
    WEBAUTHN_RP_ID: Optional[str] = None  # falls back to WEBAUTHN_ORIGIN hostname
    WEBAUTHN_ORIGIN: str = "http://localhost:3000"
    WEBAUTHN_TIMEOUT_MS: int = 30 * 60 * 1000
    WEBAUTHN_SUPPORTED_ALGORITHMS: List[int] = [-7, -257]
    WEBAUTHN_REQUIRE_RESIDENT_KEY: bool = True
    WEBAUTHN_ENFORCE_SIGN_COUNT: bool = False

    # === Attendance ===
    EMPLOYEE_ID_PREFIX: str = "AFG"
    ATTENDANCE_QR_CODE: str = (
        "At African Group, we are committed to delivering exceptional surveying, mapping, "
        "real estate, construction, and agro solutions across Africa and beyond."
    )
    ENFORCE_MOBILE_PLATFORM: bool = True

    # === Rate Limiting ===
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Africa/Lagos"
    AUTO_CREATE_TABLES: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
