import base64
import pytest
from httpx import AsyncClient
from fastapi import status

from attendance_api.utils.credential_codec import normalize
from tests.support import CREDENTIAL_RAW_ID, DESKTOP_UA, IPHONE_UA, assertion, attestation

CANONICAL_ID = normalize(CREDENTIAL_RAW_ID)


async def register(client: AsyncClient, employee_id: str = "AFG-A001", raw_id: bytes = CREDENTIAL_RAW_ID, **kwargs):
    response = await client.post("/api/v1/auth/registerRequest", json={"employeeId": employee_id}, **kwargs)
    assert response.status_code == status.HTTP_200_OK
    challenge = response.json()["challenge"]
    return await client.post(
        "/api/v1/auth/registerResponse",
        json={"employeeId": employee_id, "challenge": challenge, **attestation(raw_id, challenge)},
        **kwargs,
    )


async def sign(client: AsyncClient, credential_id: str = CANONICAL_ID, location: dict = None, **extra):
    location = location or {"locationType": "office", "latitude": 6.5, "longitude": 3.3}
    response = await client.post("/api/v1/auth/signinRequest", json={"employeeId": "AFG-A001", **location})
    assert response.status_code == status.HTTP_200_OK
    challenge = response.json()["publicKey"]["challenge"]
    return await client.post(
        "/api/v1/auth/signinResponse",
        json={"employeeId": "AFG-A001", "challenge": challenge, **assertion(credential_id, challenge), **location, **extra},
    )


@pytest.mark.asyncio
class TestEmployeeLookup:
    """Employee lookup starts the session"""

    async def test_known_employee(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/employee", json={"employee_id": "AFG-A001"})
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["user"]["employeeId"] == "AFG-A001"
        assert data["user"]["name"] == "Adaeze Okafor"
        assert data["credentials"] == []

    async def test_invalid_format(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/employee", json={"employee_id": "12345"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Invalid employee ID format"

    async def test_missing_employee_id(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/employee", json={})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_unknown_employee(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/employee", json={"employee_id": "AFG-Z999"})
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "Employee not found", "details": ["Employee not found"]}


@pytest.mark.asyncio
class TestRegistration:
    """Passkey enrolment endpoints"""

    async def test_register_passkey(self, client: AsyncClient):
        response = await register(client)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "credentialId": CANONICAL_ID}

        lookup = await client.post("/api/v1/auth/employee", json={"employee_id": "AFG-A001"})
        credentials = lookup.json()["credentials"]
        assert len(credentials) == 1
        assert credentials[0]["credId"] == CANONICAL_ID
        assert credentials[0]["platform"] == "android"

    async def test_ios_platform_recorded(self, client: AsyncClient):
        await register(client, headers={"User-Agent": IPHONE_UA})

        lookup = await client.post("/api/v1/auth/employee", json={"employee_id": "AFG-A001"})
        assert lookup.json()["credentials"][0]["platform"] == "ios"

    async def test_desktop_clients_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/registerRequest",
            json={"employeeId": "AFG-A001"},
            headers={"User-Agent": DESKTOP_UA},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        data = response.json()
        assert data["error"] == "This route is only accessible from mobile devices"
        assert data["supportedPlatforms"] == ["Android", "iOS"]

    async def test_missing_attestation_fields(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/registerResponse",
            json={"employeeId": "AFG-A001", "challenge": "abc", "id": "abc", "response": {}},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == ["Attestation object is missing", "Client data JSON is missing"]

    async def test_existing_passkey_is_excluded(self, client: AsyncClient):
        await register(client)

        response = await client.post("/api/v1/auth/registerRequest", json={"employeeId": "AFG-A001"})
        assert [c["id"] for c in response.json()["excludeCredentials"]] == [CANONICAL_ID]


@pytest.mark.asyncio
class TestSignIn:
    """Passkey assertion records attendance"""

    async def test_sign_in_then_sign_out(self, client: AsyncClient):
        await register(client)

        first = await sign(client)
        assert first.status_code == status.HTTP_200_OK
        assert first.json()["type"] == "sign-in"
        assert first.json()["message"] == "Sign in successful"

        pre_resolved = await client.post(
            "/api/v1/auth/signinRequest", json={"employeeId": "AFG-A001", "locationType": "office"}
        )
        assert pre_resolved.json()["signType"] == "sign-out"

        second = await sign(client)
        assert second.status_code == status.HTTP_200_OK
        assert second.json()["type"] == "sign-out"

    async def test_standard_base64_credential_id(self, client: AsyncClient):
        await register(client)

        response = await sign(client, credential_id=base64.b64encode(CREDENTIAL_RAW_ID).decode())
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

    async def test_remote_sign_in_without_coordinates(self, client: AsyncClient):
        await register(client)

        response = await sign(client, location={"locationType": "remote"})
        assert response.status_code == status.HTTP_200_OK

    async def test_office_without_latitude(self, client: AsyncClient):
        await register(client)

        response = await sign(client, location={"locationType": "office", "longitude": 3.3})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Latitude is required for site and office locations" in response.json()["details"]

    async def test_no_registered_passkey(self, client: AsyncClient):
        response = await sign(client)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "No credentials found for employee"

    async def test_reused_challenge(self, client: AsyncClient):
        await register(client)
        location = {"locationType": "office", "latitude": 6.5, "longitude": 3.3}
        options = await client.post("/api/v1/auth/signinRequest", json={"employeeId": "AFG-A001", **location})
        challenge = options.json()["publicKey"]["challenge"]
        body = {"employeeId": "AFG-A001", "challenge": challenge, **assertion(CANONICAL_ID, challenge), **location}

        assert (await client.post("/api/v1/auth/signinResponse", json=body)).status_code == status.HTTP_200_OK

        replay = await client.post("/api/v1/auth/signinResponse", json=body)
        assert replay.status_code == status.HTTP_400_BAD_REQUEST

    async def test_signin_options_allowed_from_desktop(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/signinRequest",
            json={"employeeId": "AFG-A001"},
            headers={"User-Agent": DESKTOP_UA},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["signType"] == "sign-in"


@pytest.mark.asyncio
class TestSignOut:
    async def test_signout_clears_session(self, logged_in: AsyncClient):
        assert (await logged_in.get("/api/v1/attendance/history")).status_code == status.HTTP_200_OK

        response = await logged_in.get("/api/v1/auth/signout")
        assert response.status_code == status.HTTP_302_FOUND
        assert response.headers["location"] == "/"

        after = await logged_in.get("/api/v1/attendance/history")
        assert after.status_code == status.HTTP_400_BAD_REQUEST
        assert after.json()["error"] == "No employee ID in session"
