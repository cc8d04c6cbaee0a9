from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from attendance_api.core.config import Settings


@dataclass(frozen=True)
class RelyingPartyConfig:
    """Relying-party identity and ceremony parameters handed to both ceremonies."""

    rp_name: str
    rp_id: str
    origin: str
    timeout_ms: int = 30 * 60 * 1000
    supported_algorithms: List[int] = field(default_factory=lambda: [-7, -257])
    require_resident_key: bool = True
    enforce_sign_count: bool = False

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelyingPartyConfig":
        origin = settings.WEBAUTHN_ORIGIN.rstrip("/")
        rp_id: Optional[str] = settings.WEBAUTHN_RP_ID or urlparse(origin).hostname
        if not rp_id:
            raise ValueError(f"Cannot derive relying party id from origin '{origin}'")

        return cls(
            rp_name=settings.WEBAUTHN_RP_NAME,
            rp_id=rp_id,
            origin=origin,
            timeout_ms=settings.WEBAUTHN_TIMEOUT_MS,
            supported_algorithms=list(settings.WEBAUTHN_SUPPORTED_ALGORITHMS),
            require_resident_key=settings.WEBAUTHN_REQUIRE_RESIDENT_KEY,
            enforce_sign_count=settings.WEBAUTHN_ENFORCE_SIGN_COUNT,
        )
