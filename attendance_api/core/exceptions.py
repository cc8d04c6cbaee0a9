from typing import List, Optional
from fastapi import HTTPException, status

class BaseAppException(HTTPException):
    def __init__(self, status_code: int, detail: str, errors: Optional[List[str]] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.errors = list(errors) if errors else [detail]

class ValidationError(BaseAppException):
    """Malformed or missing input. Carries every violated rule."""
    def __init__(self, errors: List[str] | str = "Validation error"):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(errors),
            errors=errors,
        )

class NotFoundError(BaseAppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class VerificationError(BaseAppException):
    """WebAuthn response or challenge check failed."""
    def __init__(self, detail: str = "Verification failed"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class EncodingError(BaseAppException):
    """A credential identifier could not be normalized."""
    def __init__(self, detail: str = "Invalid identifier encoding"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ConcurrentAttendanceError(BaseAppException):
    def __init__(self, detail: str = "Attendance was recorded concurrently, please retry"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class InternalError(BaseAppException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class UnsupportedPlatformError(BaseAppException):
    def __init__(self, supported_platforms: List[str]):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This route is only accessible from mobile devices",
        )
        self.supported_platforms = supported_platforms

class MissingSessionError(BaseAppException):
    def __init__(self, detail: str = "No employee ID in session"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
