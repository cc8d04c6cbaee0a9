import logging
from typing import Optional, List, Dict, Any, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_api.core.exceptions import ValidationError, EncodingError, InternalError
from attendance_api.models.biometric.webauthn_credential import WebAuthnCredential
from attendance_api.utils.credential_codec import CanonicalId, normalize
from attendance_api.utils.time_helper import now_utc, format_timestamp

logger = logging.getLogger(__name__)

class CredentialService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ---------- Validation ----------
    @staticmethod
    def _validate(employee_id: Any, credential_id: Any, public_key: Any, sign_count: Any) -> None:
        errors: List[str] = []
        if not employee_id:
            errors.append("Employee ID is required")
        if credential_id is None or credential_id == "" or credential_id == b"":
            errors.append("Credential ID is required")
        if public_key is None or public_key == "" or public_key == b"":
            errors.append("Public key is required")
        if not isinstance(sign_count, int) or isinstance(sign_count, bool) or sign_count < 0:
            errors.append("Sign count must be a non-negative integer")
        if errors:
            raise ValidationError(errors)

    # ---------- Create / Upsert ----------
    async def create(
        self,
        employee_id: str,
        credential_id: Any,
        public_key: Any,
        sign_count: int = 0,
        aaguid: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> WebAuthnCredential:
        """Insert a credential, or refresh counter/last-used when the id already exists."""
        self._validate(employee_id, credential_id, public_key, sign_count)

        canonical_id = normalize(credential_id)
        canonical_key = normalize(public_key)

        try:
            existing = await self.find_by_credential_id(canonical_id, already_normalized=True)
            if existing:
                return await self._refresh_existing(existing, employee_id, sign_count)

            credential = WebAuthnCredential(
                employee_id=employee_id,
                credential_id=canonical_id,
                public_key=canonical_key,
                sign_count=sign_count,
                aaguid=aaguid,
                platform=platform,
            )
            self.session.add(credential)
            await self.session.commit()
            await self.session.refresh(credential)

            logger.info(f"Credential stored: Employee {employee_id}, Credential {canonical_id[:12]}...")
            return credential

        except IntegrityError:
            # Same credential id inserted by a concurrent request
            await self.session.rollback()
            existing = await self.find_by_credential_id(canonical_id, already_normalized=True)
            if not existing:
                logger.error(f"Credential insert conflicted but no row found for {canonical_id}")
                raise InternalError("Failed to store credential")
            return await self._refresh_existing(existing, employee_id, sign_count)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error storing credential for {employee_id}: {e}")
            raise InternalError("Failed to store credential")

    async def _refresh_existing(self, credential: WebAuthnCredential, employee_id: str, sign_count: int) -> WebAuthnCredential:
        if credential.employee_id != employee_id:
            logger.warning(
                f"Credential {credential.credential_id[:12]}... already bound to {credential.employee_id}, "
                f"re-registration attempted by {employee_id}"
            )
            raise ValidationError("Credential is already registered to another employee")

        # Counter never moves backwards
        if sign_count > (credential.sign_count or 0):
            credential.sign_count = sign_count
        credential.last_used_at = now_utc()
        await self.session.commit()
        await self.session.refresh(credential)
        return credential

    # ---------- Queries ----------
    async def find_by_employee_id(self, employee_id: str) -> List[WebAuthnCredential]:
        try:
            result = await self.session.execute(
                select(WebAuthnCredential)
                .where(WebAuthnCredential.employee_id == employee_id)
                .order_by(WebAuthnCredential.created_at)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching credentials for {employee_id}: {e}")
            raise InternalError("Failed to fetch credentials")

    async def _get_exact(self, credential_id: str) -> Optional[WebAuthnCredential]:
        try:
            result = await self.session.execute(
                select(WebAuthnCredential).where(WebAuthnCredential.credential_id == credential_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching credential {credential_id}: {e}")
            raise InternalError("Failed to fetch credential")

    async def find_by_credential_id(self, credential_id: Any, already_normalized: bool = False) -> Optional[WebAuthnCredential]:
        """Exact lookup first; unless told the id is canonical, retry with its canonical form."""
        if isinstance(credential_id, str) and credential_id:
            credential = await self._get_exact(credential_id)
            if credential or already_normalized:
                return credential

        try:
            canonical_id = normalize(credential_id)
        except EncodingError as e:
            logger.debug(f"Credential lookup with undecodable id: {e.detail}")
            return None

        if canonical_id == credential_id:
            return None
        return await self._get_exact(canonical_id)

    @staticmethod
    def match(credentials: Iterable[WebAuthnCredential], submitted_id: Any) -> Optional[WebAuthnCredential]:
        """Resolve a submitted id against stored credentials, tolerating encoding differences."""
        credentials = list(credentials)

        for credential in credentials:
            if credential.credential_id == submitted_id:
                return credential

        try:
            canonical_submitted = normalize(submitted_id)
        except EncodingError as e:
            logger.warning(f"Submitted credential id could not be decoded: {e.detail}")
            return None

        for credential in credentials:
            try:
                if normalize(credential.credential_id) == canonical_submitted:
                    return credential
            except EncodingError:
                logger.warning(f"Stored credential {credential.id} has an undecodable id, skipping")
        return None

    # ---------- Usage ----------
    async def record_use(self, credential_id: CanonicalId, new_counter: int) -> Optional[WebAuthnCredential]:
        """Refresh last-used; advance the counter only when it strictly increases."""
        try:
            credential = await self.find_by_credential_id(credential_id, already_normalized=True)
            if not credential:
                logger.warning(f"record_use for unknown credential {credential_id}")
                return None

            credential.last_used_at = now_utc()
            if new_counter > (credential.sign_count or 0):
                credential.sign_count = new_counter

            await self.session.commit()
            await self.session.refresh(credential)
            return credential
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error recording credential use for {credential_id}: {e}")
            raise InternalError("Failed to update credential")

    @staticmethod
    def format_credential(credential: WebAuthnCredential) -> Dict[str, Any]:
        return {
            "credId": credential.credential_id,
            "publicKey": credential.public_key,
            "prevCounter": credential.sign_count,
            "platform": credential.platform,
            "createdAt": format_timestamp(credential.created_at),
            "lastUsed": format_timestamp(credential.last_used_at),
        }
