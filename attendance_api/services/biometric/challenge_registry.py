import asyncio
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from attendance_api.core.config import settings
from attendance_api.core.exceptions import EncodingError, VerificationError
from attendance_api.models.shared.enums import CeremonyType
from attendance_api.utils.credential_codec import normalize, to_bytes

logger = logging.getLogger(__name__)

@dataclass
class IssuedChallenge:
    value: bytes
    employee_id: str
    ceremony: CeremonyType
    expires_at: float

class ChallengeRegistry:
    """In-memory record of issued WebAuthn challenges. Each one verifies at most once."""

    def __init__(self, ttl_seconds: float, cleanup_interval: int = 60):
        self.ttl_seconds = ttl_seconds
        self._challenges: Dict[str, IssuedChallenge] = {}
        self._lock = asyncio.Lock()
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval

    def _cleanup_expired(self, current_time: float):
        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        expired = [key for key, item in self._challenges.items() if item.expires_at <= current_time]
        for key in expired:
            del self._challenges[key]

        self._last_cleanup = current_time
        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired challenges")

    async def issue(self, employee_id: str, ceremony: CeremonyType, challenge: Optional[bytes] = None) -> bytes:
        """Record a fresh random challenge for one ceremony of one employee."""
        value = challenge or secrets.token_bytes(32)
        async with self._lock:
            current_time = time.time()
            self._cleanup_expired(current_time)
            self._challenges[normalize(value)] = IssuedChallenge(
                value=value,
                employee_id=employee_id,
                ceremony=ceremony,
                expires_at=current_time + self.ttl_seconds,
            )
        return value

    async def consume(self, challenge: Any, employee_id: str, ceremony: CeremonyType) -> bytes:
        """Remove and return the issued challenge bytes, or raise VerificationError."""
        try:
            key = normalize(challenge)
        except EncodingError:
            raise VerificationError("Challenge is not a valid encoded value")

        async with self._lock:
            issued = self._challenges.pop(key, None)

        if issued is None:
            logger.warning(f"Unknown or reused {ceremony.value} challenge from {employee_id}")
            raise VerificationError("Challenge was not issued or has already been used")
        if issued.expires_at <= time.time():
            logger.warning(f"Expired {ceremony.value} challenge from {employee_id}")
            raise VerificationError("Challenge has expired")
        if issued.employee_id != employee_id or issued.ceremony != ceremony:
            logger.warning(
                f"Challenge issued to {issued.employee_id} for {issued.ceremony.value} "
                f"submitted by {employee_id} for {ceremony.value}"
            )
            raise VerificationError("Challenge was not issued for this ceremony")
        if not hmac.compare_digest(issued.value, to_bytes(key)):
            raise VerificationError("Challenge mismatch")

        return issued.value

    def __len__(self) -> int:
        return len(self._challenges)


challenge_registry = ChallengeRegistry(ttl_seconds=settings.WEBAUTHN_TIMEOUT_MS / 1000)
