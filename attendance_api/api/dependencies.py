import logging
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Request

from attendance_api.core.config import settings
from attendance_api.core.exceptions import UnsupportedPlatformError, MissingSessionError
from attendance_api.core.webauthn_config import RelyingPartyConfig
from attendance_api.models.shared.enums import ClientPlatform
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry, challenge_registry
from attendance_api.services.biometric.webauthn_verifier import WebAuthnVerifier

logger = logging.getLogger(__name__)

SESSION_EMPLOYEE_KEY = "employee_id"


@lru_cache
def get_relying_party() -> RelyingPartyConfig:
    return RelyingPartyConfig.from_settings(settings)


def get_webauthn_verifier(rp: RelyingPartyConfig = Depends(get_relying_party)) -> WebAuthnVerifier:
    return WebAuthnVerifier(rp)


def get_challenge_registry() -> ChallengeRegistry:
    return challenge_registry


def detect_platform(user_agent: Optional[str]) -> Optional[ClientPlatform]:
    user_agent = (user_agent or "").lower()
    if "android" in user_agent:
        return ClientPlatform.ANDROID
    if "iphone" in user_agent or "ipad" in user_agent:
        return ClientPlatform.IOS
    return None


async def require_mobile_platform(request: Request) -> Optional[ClientPlatform]:
    """Passkey ceremonies are restricted to Android and iOS clients."""
    platform = detect_platform(request.headers.get("user-agent"))
    if platform is None and settings.ENFORCE_MOBILE_PLATFORM:
        logger.warning(f"Blocked {request.url.path} from non-mobile client: {request.headers.get('user-agent')}")
        raise UnsupportedPlatformError(supported_platforms=["Android", "iOS"])
    return platform


async def get_session_employee_id(request: Request) -> str:
    employee_id = request.session.get(SESSION_EMPLOYEE_KEY)
    if not employee_id:
        raise MissingSessionError()
    return employee_id
