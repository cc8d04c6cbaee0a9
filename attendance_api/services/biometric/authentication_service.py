import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_api.core.exceptions import ValidationError, NotFoundError, ConcurrentAttendanceError
from attendance_api.models.hr.attendance import AttendanceRecord
from attendance_api.models.shared.enums import AttendanceType, CeremonyType
from attendance_api.schemas.hr.attendance_schema import AttendanceCreate
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry, challenge_registry
from attendance_api.services.biometric.credential_service import CredentialService
from attendance_api.services.biometric.webauthn_verifier import WebAuthnVerifier
from attendance_api.services.hr.attendance_service import AttendanceService, ATTENDANCE_TYPES, LOCATION_TYPES, validate_location
from attendance_api.services.hr.attendance_type_resolver import AttendanceTypeResolver, ResolverStats, resolver_stats
from attendance_api.services.hr.employee_service import EmployeeService
from attendance_api.utils.credential_codec import to_bytes
from attendance_api.utils.time_helper import ensure_utc, now_utc

logger = logging.getLogger(__name__)

MAX_RECORD_ATTEMPTS = 3


@dataclass
class AuthenticationResult:
    record: AttendanceRecord
    type: AttendanceType
    message: str
    timestamp: datetime


def assertion_payload(assertion: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a client assertion into the JSON structure the verifier parses."""
    credential_id = assertion.get("id") or assertion.get("rawId")
    payload = {
        "id": credential_id,
        "rawId": assertion.get("rawId") or credential_id,
        "type": assertion.get("type") or "public-key",
        "response": dict(assertion.get("response") or {}),
        "clientExtensionResults": assertion.get("clientExtensionResults") or {},
    }
    if assertion.get("authenticatorAttachment"):
        payload["authenticatorAttachment"] = assertion["authenticatorAttachment"]
    return payload


def success_message(event_type: AttendanceType) -> str:
    return "Sign in successful" if event_type == AttendanceType.SIGN_IN else "Sign out successful"


class AuthenticationService:
    """Verifies a passkey assertion and appends the resulting attendance event."""

    def __init__(
        self,
        session: AsyncSession,
        verifier: WebAuthnVerifier,
        challenges: ChallengeRegistry = challenge_registry,
        stats: ResolverStats = resolver_stats,
    ):
        self.session = session
        self.verifier = verifier
        self.challenges = challenges
        self.employee_service = EmployeeService(session)
        self.credential_service = CredentialService(session)
        self.attendance_service = AttendanceService(session)
        self.resolver = AttendanceTypeResolver(self.attendance_service, stats)

    # ---------- Options ----------
    async def begin_authentication(
        self,
        employee_id: str,
        intended_type: Optional[str] = None,
        location_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Issue assertion options. Credentials are not required until finish."""
        errors: List[str] = []
        if not employee_id:
            errors.append("Employee ID is required")
        if intended_type and intended_type not in ATTENDANCE_TYPES:
            errors.append("Invalid attendance type")
        if location_type and location_type not in LOCATION_TYPES:
            errors.append("Invalid location type")
        if errors:
            raise ValidationError(errors)

        if intended_type:
            sign_type = AttendanceType(intended_type)
        elif location_type:
            sign_type = await self.resolver.resolve(employee_id, location_type)
        else:
            sign_type = AttendanceType.SIGN_IN

        challenge = await self.challenges.issue(employee_id, CeremonyType.AUTHENTICATION)
        options = self.verifier.authentication_options(challenge)

        logger.info(f"Authentication options issued: Employee {employee_id}, expected {sign_type.value}")
        return {"publicKey": options, "signType": sign_type.value}

    # ---------- Verification ----------
    @staticmethod
    def _validate_finish(
        employee_id: Optional[str],
        challenge: Optional[str],
        assertion: Dict[str, Any],
        location_type: Optional[str],
        latitude: Optional[float],
        longitude: Optional[float],
        event_type: Optional[str],
    ) -> None:
        errors: List[str] = []
        if not employee_id:
            errors.append("Employee ID is required")
        if not challenge:
            errors.append("Challenge is required")
        if not (assertion.get("id") or assertion.get("rawId")):
            errors.append("Credential ID is missing")
        errors.extend(validate_location(location_type, latitude, longitude))
        if event_type and event_type not in ATTENDANCE_TYPES:
            errors.append("Invalid attendance type")
        if errors:
            logger.warning(f"Authentication response rejected for {employee_id}: {errors}")
            raise ValidationError(errors)

    async def finish_authentication(
        self,
        employee_id: str,
        challenge: Optional[str],
        assertion: Dict[str, Any],
        location_type: Optional[str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        event_type: Optional[str] = None,
        site_id: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AuthenticationResult:
        assertion = assertion or {}
        self._validate_finish(employee_id, challenge, assertion, location_type, latitude, longitude, event_type)

        employee = await self.employee_service.get_active_employee(employee_id)
        credentials = await self.credential_service.find_by_employee_id(employee.employee_id)
        if not credentials:
            raise NotFoundError("No credentials found for employee")

        submitted_id = assertion.get("id") or assertion.get("rawId")
        credential = self.credential_service.match(credentials, submitted_id)
        if not credential:
            logger.warning(f"Submitted credential does not belong to {employee.employee_id}")
            raise NotFoundError("Credential not found for this employee")

        expected_challenge = await self.challenges.consume(challenge, employee.employee_id, CeremonyType.AUTHENTICATION)

        stored_count = credential.sign_count or 0
        new_count = self.verifier.verify_authentication(
            assertion_payload(assertion),
            expected_challenge,
            public_key=to_bytes(credential.public_key),
            # 0 disables the library's replay check; see WEBAUTHN_ENFORCE_SIGN_COUNT
            current_sign_count=stored_count if self.verifier.rp.enforce_sign_count else 0,
        )

        if new_count <= stored_count and (new_count > 0 or stored_count > 0):
            logger.warning(
                f"Non-increasing signature counter for credential {credential.credential_id[:12]}... "
                f"of {employee.employee_id}: stored {stored_count}, received {new_count}"
            )

        record = await self._record_attendance(
            AttendanceCreate(
                employee_id=employee.employee_id,
                name=employee.name,
                location_type=location_type,
                site_id=site_id,
                latitude=latitude,
                longitude=longitude,
                address=address,
                notes=notes,
            ),
            event_type,
        )
        await self.credential_service.record_use(credential.credential_id, new_count)

        event = AttendanceType(record.type)
        logger.info(f"Attendance verified: {employee.employee_id} {event.value} at {record.location_type.value}")
        return AuthenticationResult(
            record=record,
            type=event,
            message=success_message(event),
            timestamp=ensure_utc(record.timestamp),
        )

    async def _record_attendance(self, record: AttendanceCreate, event_type: Optional[str]) -> AttendanceRecord:
        """Resolve the event type and append the record, retrying sequence collisions."""
        for attempt in range(1, MAX_RECORD_ATTEMPTS + 1):
            now = now_utc()
            if event_type:
                resolved = AttendanceType(event_type)
            else:
                resolved = await self.resolver.resolve(record.employee_id, record.location_type, now)

            try:
                return await self.attendance_service.create(
                    record.model_copy(update={"type": resolved.value, "timestamp": now})
                )
            except ConcurrentAttendanceError:
                if attempt == MAX_RECORD_ATTEMPTS:
                    raise
                logger.info(f"Retrying attendance write for {record.employee_id} (attempt {attempt + 1})")
