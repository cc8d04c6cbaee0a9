import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_api.core.exceptions import ValidationError, EncodingError
from attendance_api.models.biometric.webauthn_credential import WebAuthnCredential
from attendance_api.models.shared.enums import CeremonyType
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry, challenge_registry
from attendance_api.services.biometric.credential_service import CredentialService
from attendance_api.services.biometric.webauthn_verifier import WebAuthnVerifier
from attendance_api.services.hr.employee_service import EmployeeService
from attendance_api.utils.credential_codec import to_bytes

logger = logging.getLogger(__name__)


def registration_payload(credential: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a client attestation into the JSON structure the verifier parses."""
    credential_id = credential.get("id") or credential.get("rawId")
    payload = {
        "id": credential_id,
        "rawId": credential.get("rawId") or credential_id,
        "type": credential.get("type") or "public-key",
        "response": dict(credential.get("response") or {}),
        "clientExtensionResults": credential.get("clientExtensionResults") or {},
    }
    if credential.get("authenticatorAttachment"):
        payload["authenticatorAttachment"] = credential["authenticatorAttachment"]
    return payload


class RegistrationService:
    """Enrolls a platform passkey for an employee: options, then attestation verification."""

    def __init__(
        self,
        session: AsyncSession,
        verifier: WebAuthnVerifier,
        challenges: ChallengeRegistry = challenge_registry,
    ):
        self.session = session
        self.verifier = verifier
        self.challenges = challenges
        self.employee_service = EmployeeService(session)
        self.credential_service = CredentialService(session)

    async def begin_registration(self, employee_id: str) -> Dict[str, Any]:
        if not employee_id:
            raise ValidationError("Employee ID is required")
        employee = await self.employee_service.get_active_employee(employee_id)
        existing = await self.credential_service.find_by_employee_id(employee.employee_id)

        exclude_ids: List[bytes] = []
        for credential in existing:
            try:
                exclude_ids.append(to_bytes(credential.credential_id))
            except EncodingError:
                logger.warning(f"Skipping undecodable credential {credential.id} in exclude list")

        challenge = await self.challenges.issue(employee.employee_id, CeremonyType.REGISTRATION)
        options = self.verifier.registration_options(
            employee_id=employee.employee_id,
            display_name=employee.name,
            challenge=challenge,
            exclude_credential_ids=exclude_ids,
        )

        logger.info(
            f"Registration options issued: Employee {employee.employee_id}, "
            f"{len(exclude_ids)} existing credential(s) excluded"
        )
        return options

    async def finish_registration(
        self,
        employee_id: str,
        challenge: Optional[str],
        credential: Dict[str, Any],
        platform: Optional[str] = None,
    ) -> WebAuthnCredential:
        """Verify an attestation and store the credential. Returns the row with the canonical id."""
        credential = credential or {}
        response = credential.get("response") or {}

        errors: List[str] = []
        if not employee_id:
            errors.append("Employee ID is required")
        if not challenge:
            errors.append("Challenge is required")
        if not (credential.get("id") or credential.get("rawId")):
            errors.append("Credential ID is missing")
        if not response.get("attestationObject"):
            errors.append("Attestation object is missing")
        if not response.get("clientDataJSON"):
            errors.append("Client data JSON is missing")
        if errors:
            logger.warning(f"Registration response rejected for {employee_id}: {errors}")
            raise ValidationError(errors)

        employee = await self.employee_service.get_active_employee(employee_id)
        expected_challenge = await self.challenges.consume(challenge, employee.employee_id, CeremonyType.REGISTRATION)

        verified = self.verifier.verify_registration(registration_payload(credential), expected_challenge)

        stored = await self.credential_service.create(
            employee_id=employee.employee_id,
            credential_id=verified.credential_id,
            public_key=verified.public_key,
            sign_count=verified.sign_count,
            aaguid=verified.aaguid,
            platform=platform or credential.get("authenticatorAttachment"),
        )

        logger.info(f"Passkey registered: Employee {employee.employee_id}, Credential {stored.credential_id[:12]}...")
        return stored
