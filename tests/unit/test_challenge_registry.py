import pytest

from attendance_api.core.exceptions import VerificationError
from attendance_api.models.shared.enums import CeremonyType
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry
from attendance_api.utils.credential_codec import normalize


@pytest.mark.asyncio
class TestChallengeRegistry:
    async def test_issue_generates_random_challenges(self, challenges):
        first = await challenges.issue("AFG-A001", CeremonyType.REGISTRATION)
        second = await challenges.issue("AFG-A001", CeremonyType.REGISTRATION)

        assert len(first) == 32
        assert first != second
        assert len(challenges) == 2

    async def test_consume_accepts_any_encoding_once(self, challenges):
        value = await challenges.issue("AFG-A001", CeremonyType.AUTHENTICATION)

        assert await challenges.consume(normalize(value), "AFG-A001", CeremonyType.AUTHENTICATION) == value

        with pytest.raises(VerificationError):
            await challenges.consume(normalize(value), "AFG-A001", CeremonyType.AUTHENTICATION)
        assert len(challenges) == 0

    async def test_unknown_challenge_rejected(self, challenges):
        with pytest.raises(VerificationError):
            await challenges.consume(normalize(b"never-issued"), "AFG-A001", CeremonyType.REGISTRATION)

    async def test_expired_challenge_rejected(self):
        registry = ChallengeRegistry(ttl_seconds=0)
        value = await registry.issue("AFG-A001", CeremonyType.REGISTRATION)

        with pytest.raises(VerificationError) as exc_info:
            await registry.consume(normalize(value), "AFG-A001", CeremonyType.REGISTRATION)
        assert "expired" in exc_info.value.detail

    async def test_bound_to_employee(self, challenges):
        value = await challenges.issue("AFG-A001", CeremonyType.AUTHENTICATION)

        with pytest.raises(VerificationError):
            await challenges.consume(normalize(value), "AFG-B014", CeremonyType.AUTHENTICATION)

    async def test_bound_to_ceremony(self, challenges):
        value = await challenges.issue("AFG-A001", CeremonyType.REGISTRATION)

        with pytest.raises(VerificationError):
            await challenges.consume(normalize(value), "AFG-A001", CeremonyType.AUTHENTICATION)

    async def test_undecodable_challenge_rejected(self, challenges):
        with pytest.raises(VerificationError):
            await challenges.consume("not a challenge!", "AFG-A001", CeremonyType.REGISTRATION)
