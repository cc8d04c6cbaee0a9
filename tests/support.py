"""Builders for fake WebAuthn client payloads and a verifier double."""
import json
from typing import Any, Dict, List, Optional

from webauthn.helpers import base64url_to_bytes, bytes_to_base64url

from attendance_api.core.exceptions import VerificationError
from attendance_api.core.webauthn_config import RelyingPartyConfig
from attendance_api.services.biometric.webauthn_verifier import VerifiedCredential

ORIGIN = "https://attendance.test"
RP_ID = "attendance.test"

ANDROID_UA = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36"
)
IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# Encodes to "-_-_..." in base64url and "+/+/..." in standard base64
CREDENTIAL_RAW_ID = b"\xfb\xff\xbfpasskey-01"


def client_data(ceremony: str, challenge: str, origin: str = ORIGIN) -> str:
    payload = {"type": ceremony, "challenge": challenge, "origin": origin, "crossOrigin": False}
    return bytes_to_base64url(json.dumps(payload).encode("utf-8"))


def attestation(credential_id: bytes, challenge: str, origin: str = ORIGIN) -> Dict[str, Any]:
    encoded = bytes_to_base64url(credential_id)
    return {
        "id": encoded,
        "rawId": encoded,
        "type": "public-key",
        "authenticatorAttachment": "platform",
        "response": {
            "clientDataJSON": client_data("webauthn.create", challenge, origin),
            "attestationObject": bytes_to_base64url(b"fake-attestation-object"),
        },
    }


def assertion(credential_id: str, challenge: str, origin: str = ORIGIN) -> Dict[str, Any]:
    return {
        "id": credential_id,
        "rawId": credential_id,
        "type": "public-key",
        "response": {
            "clientDataJSON": client_data("webauthn.get", challenge, origin),
            "authenticatorData": bytes_to_base64url(b"fake-authenticator-data"),
            "signature": bytes_to_base64url(b"fake-signature"),
            "userHandle": bytes_to_base64url(b"AFG-A001"),
        },
    }


def relying_party(**overrides) -> RelyingPartyConfig:
    options = {"rp_name": "Attendance Test", "rp_id": RP_ID, "origin": ORIGIN, "timeout_ms": 60000}
    options.update(overrides)
    return RelyingPartyConfig(**options)


class FakeVerifier:
    """Checks client data against the issued challenge; signatures are not evaluated."""

    def __init__(self, rp: RelyingPartyConfig):
        self.rp = rp
        self.sign_count = 0
        self.calls: List[tuple] = []

    def registration_options(self, employee_id: str, display_name: str, challenge: bytes, exclude_credential_ids: List[bytes]) -> Dict[str, Any]:
        return {
            "rp": {"id": self.rp.rp_id, "name": self.rp.rp_name},
            "user": {"id": bytes_to_base64url(employee_id.encode()), "name": employee_id, "displayName": display_name},
            "challenge": bytes_to_base64url(challenge),
            "excludeCredentials": [
                {"id": bytes_to_base64url(credential_id), "type": "public-key"}
                for credential_id in exclude_credential_ids
            ],
        }

    def authentication_options(self, challenge: bytes) -> Dict[str, Any]:
        return {"challenge": bytes_to_base64url(challenge), "rpId": self.rp.rp_id, "userVerification": "required"}

    def _check_client_data(self, credential: Dict[str, Any], expected_challenge: bytes, ceremony: str):
        data = json.loads(base64url_to_bytes(credential["response"]["clientDataJSON"]))
        if (
            data.get("type") != ceremony
            or data.get("challenge") != bytes_to_base64url(expected_challenge)
            or data.get("origin") != self.rp.origin
        ):
            raise VerificationError("Client data does not match the issued challenge")

    def verify_registration(self, credential: Dict[str, Any], expected_challenge: bytes) -> VerifiedCredential:
        self._check_client_data(credential, expected_challenge, "webauthn.create")
        raw_id = base64url_to_bytes(credential["rawId"])
        self.calls.append(("verify_registration", raw_id))
        return VerifiedCredential(
            credential_id=raw_id,
            public_key=b"cose-key:" + raw_id,
            sign_count=self.sign_count,
            aaguid="00000000-0000-0000-0000-000000000000",
        )

    def verify_authentication(
        self,
        credential: Dict[str, Any],
        expected_challenge: bytes,
        public_key: bytes,
        current_sign_count: int,
    ) -> int:
        self._check_client_data(credential, expected_challenge, "webauthn.get")
        self.calls.append(("verify_authentication", public_key, current_sign_count))
        if (self.sign_count > 0 or current_sign_count > 0) and self.sign_count <= current_sign_count:
            raise VerificationError("Authentication verification failed: sign count did not increase")
        return self.sign_count


def find_call(verifier: FakeVerifier, name: str) -> Optional[tuple]:
    for call in reversed(verifier.calls):
        if call[0] == name:
            return call
    return None
