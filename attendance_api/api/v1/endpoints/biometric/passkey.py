import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_api.api.dependencies import (
    SESSION_EMPLOYEE_KEY,
    get_challenge_registry,
    get_webauthn_verifier,
    require_mobile_platform,
)
from attendance_api.core.database import get_async_session
from attendance_api.models.shared.enums import ClientPlatform
from attendance_api.schemas.biometric.webauthn_schema import (
    EmployeeLookupRequest, EmployeeLookupResponse,
    RegistrationOptionsRequest, RegistrationVerifyRequest, RegistrationVerifyResponse,
    AuthenticationOptionsRequest, AuthenticationVerifyRequest, AuthenticationVerifyResponse,
)
from attendance_api.services.biometric.authentication_service import AuthenticationService
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry
from attendance_api.services.biometric.credential_service import CredentialService
from attendance_api.services.biometric.registration_service import RegistrationService
from attendance_api.services.biometric.webauthn_verifier import WebAuthnVerifier
from attendance_api.services.hr.employee_service import EmployeeService

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/employee", response_model=EmployeeLookupResponse)
async def lookup_employee(
    body: EmployeeLookupRequest,
    request: Request,
    session: AsyncSession = Depends(get_async_session),
):
    """Find an employee by ID and start a session for them"""
    employee_service = EmployeeService(session)
    credential_service = CredentialService(session)

    employee = await employee_service.lookup(body.employee_id)
    credentials = await credential_service.find_by_employee_id(employee.employee_id)

    request.session[SESSION_EMPLOYEE_KEY] = employee.employee_id

    return {
        "user": employee_service.format_employee(employee),
        "credentials": [credential_service.format_credential(c) for c in credentials],
    }

@router.post("/registerRequest")
async def registration_options(
    body: RegistrationOptionsRequest,
    session: AsyncSession = Depends(get_async_session),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
    challenges: ChallengeRegistry = Depends(get_challenge_registry),
    platform: Optional[ClientPlatform] = Depends(require_mobile_platform),
):
    """Issue passkey creation options for an employee"""
    registration_service = RegistrationService(session, verifier, challenges)
    return await registration_service.begin_registration(body.employee_id)

@router.post("/registerResponse", response_model=RegistrationVerifyResponse)
async def registration_verify(
    body: RegistrationVerifyRequest,
    session: AsyncSession = Depends(get_async_session),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
    challenges: ChallengeRegistry = Depends(get_challenge_registry),
    platform: Optional[ClientPlatform] = Depends(require_mobile_platform),
):
    """Verify the attestation and store the new passkey"""
    registration_service = RegistrationService(session, verifier, challenges)
    credential = await registration_service.finish_registration(
        employee_id=body.employee_id,
        challenge=body.challenge,
        credential=body.credential(),
        platform=platform.value if platform else None,
    )
    return RegistrationVerifyResponse(success=True, credentialId=credential.credential_id)

@router.post("/signinRequest")
async def authentication_options(
    body: AuthenticationOptionsRequest,
    session: AsyncSession = Depends(get_async_session),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
    challenges: ChallengeRegistry = Depends(get_challenge_registry),
):
    """Issue assertion options along with the expected sign type"""
    authentication_service = AuthenticationService(session, verifier, challenges)
    return await authentication_service.begin_authentication(
        body.employee_id,
        intended_type=body.type,
        location_type=body.location_type,
    )

@router.post("/signinResponse", response_model=AuthenticationVerifyResponse)
async def authentication_verify(
    body: AuthenticationVerifyRequest,
    session: AsyncSession = Depends(get_async_session),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
    challenges: ChallengeRegistry = Depends(get_challenge_registry),
    platform: Optional[ClientPlatform] = Depends(require_mobile_platform),
):
    """Verify the assertion and record the attendance event"""
    authentication_service = AuthenticationService(session, verifier, challenges)
    result = await authentication_service.finish_authentication(
        employee_id=body.employee_id,
        challenge=body.challenge,
        assertion=body.assertion(),
        location_type=body.location_type,
        latitude=body.latitude,
        longitude=body.longitude,
        event_type=body.authentication_type,
        site_id=body.site_id,
        address=body.address,
        notes=body.notes,
    )
    return AuthenticationVerifyResponse(
        success=True,
        type=result.type.value,
        message=result.message,
        timestamp=result.timestamp,
    )

@router.get("/signout")
async def signout(request: Request):
    """Clear the employee session"""
    request.session.clear()
    return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
