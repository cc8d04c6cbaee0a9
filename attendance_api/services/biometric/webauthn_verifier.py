"""
Thin adapter over the ``webauthn`` library.

Generates ceremony options as JSON-ready dicts and verifies client responses,
translating library failures into ``VerificationError``. Ceremonies depend on
this class rather than on the library directly so it can be replaced in tests.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from webauthn import (
    generate_registration_options,
    verify_registration_response,
    generate_authentication_options,
    verify_authentication_response,
    options_to_json,
)
from webauthn.helpers.exceptions import WebAuthnException
from webauthn.helpers.structs import (
    AttestationConveyancePreference,
    AuthenticatorAttachment,
    AuthenticatorSelectionCriteria,
    AuthenticatorTransport,
    PublicKeyCredentialDescriptor,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)
from webauthn.helpers.cose import COSEAlgorithmIdentifier

from attendance_api.core.exceptions import VerificationError
from attendance_api.core.webauthn_config import RelyingPartyConfig

logger = logging.getLogger(__name__)


@dataclass
class VerifiedCredential:
    credential_id: bytes
    public_key: bytes
    sign_count: int
    aaguid: Optional[str] = None


class WebAuthnVerifier:
    def __init__(self, rp: RelyingPartyConfig):
        self.rp = rp

    # ---------- Options ----------
    def registration_options(
        self,
        employee_id: str,
        display_name: str,
        challenge: bytes,
        exclude_credential_ids: List[bytes],
    ) -> Dict[str, Any]:
        resident_key = ResidentKeyRequirement.REQUIRED if self.rp.require_resident_key else ResidentKeyRequirement.PREFERRED
        options = generate_registration_options(
            rp_id=self.rp.rp_id,
            rp_name=self.rp.rp_name,
            user_id=employee_id.encode("utf-8"),
            user_name=employee_id,
            user_display_name=display_name or employee_id,
            challenge=challenge,
            timeout=self.rp.timeout_ms,
            attestation=AttestationConveyancePreference.NONE,
            authenticator_selection=AuthenticatorSelectionCriteria(
                authenticator_attachment=AuthenticatorAttachment.PLATFORM,
                resident_key=resident_key,
                require_resident_key=self.rp.require_resident_key,
                user_verification=UserVerificationRequirement.REQUIRED,
            ),
            exclude_credentials=[
                PublicKeyCredentialDescriptor(
                    id=credential_id,
                    transports=[AuthenticatorTransport.INTERNAL, AuthenticatorTransport.HYBRID],
                )
                for credential_id in exclude_credential_ids
            ],
            supported_pub_key_algs=[COSEAlgorithmIdentifier(alg) for alg in self.rp.supported_algorithms],
        )
        return json.loads(options_to_json(options))

    def authentication_options(self, challenge: bytes) -> Dict[str, Any]:
        # No allowCredentials: platform credentials are discoverable
        options = generate_authentication_options(
            rp_id=self.rp.rp_id,
            challenge=challenge,
            timeout=self.rp.timeout_ms,
            user_verification=UserVerificationRequirement.REQUIRED,
        )
        return json.loads(options_to_json(options))

    # ---------- Verification ----------
    def verify_registration(self, credential: Dict[str, Any], expected_challenge: bytes) -> VerifiedCredential:
        try:
            verification = verify_registration_response(
                credential=credential,
                expected_challenge=expected_challenge,
                expected_rp_id=self.rp.rp_id,
                expected_origin=self.rp.origin,
                require_user_verification=True,
            )
        except (WebAuthnException, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Registration verification failed: {e}")
            raise VerificationError(f"Registration verification failed: {e}")

        return VerifiedCredential(
            credential_id=verification.credential_id,
            public_key=verification.credential_public_key,
            sign_count=verification.sign_count,
            aaguid=verification.aaguid,
        )

    def verify_authentication(
        self,
        credential: Dict[str, Any],
        expected_challenge: bytes,
        public_key: bytes,
        current_sign_count: int,
    ) -> int:
        """Verify an assertion and return the authenticator's new signature counter."""
        try:
            verification = verify_authentication_response(
                credential=credential,
                expected_challenge=expected_challenge,
                expected_rp_id=self.rp.rp_id,
                expected_origin=self.rp.origin,
                credential_public_key=public_key,
                credential_current_sign_count=current_sign_count,
                require_user_verification=True,
            )
        except (WebAuthnException, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Authentication verification failed: {e}")
            raise VerificationError(f"Authentication verification failed: {e}")

        return verification.new_sign_count
