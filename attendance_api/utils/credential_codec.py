"""
Credential identifier codec.

Authenticators hand out raw bytes, browsers serialize them as URL-safe base64,
some clients send standard base64 and older rows may hold a serialized byte
array. Every identifier that crosses a boundary goes through ``normalize`` so
that comparisons and lookups always operate on one canonical form: unpadded
URL-safe base64.
"""
import base64
import binascii
import logging
import re
from typing import Any, NewType

from webauthn.helpers import base64url_to_bytes, bytes_to_base64url

from attendance_api.core.exceptions import EncodingError
from attendance_api.models.shared.enums import CredentialEncoding

logger = logging.getLogger(__name__)

CanonicalId = NewType("CanonicalId", str)

_STANDARD_MARKERS = frozenset("+/")
_URLSAFE_MARKERS = frozenset("-_")
_BASE64_TEXT = re.compile(r"^[A-Za-z0-9+/\-_]+={0,2}$")


def detect_encoding(value: Any) -> CredentialEncoding:
    """Classify the representation of an identifier without decoding it."""
    if value is None:
        raise EncodingError("Credential identifier is required")

    if isinstance(value, (bytes, bytearray, memoryview)):
        return CredentialEncoding.RAW

    if isinstance(value, dict):
        if value.get("type") == "Buffer" and isinstance(value.get("data"), list):
            return CredentialEncoding.BYTE_ARRAY
        raise EncodingError("Unsupported credential identifier object")

    if isinstance(value, (list, tuple)):
        return CredentialEncoding.BYTE_ARRAY

    if isinstance(value, str):
        text = value.strip()
        has_standard = any(ch in _STANDARD_MARKERS for ch in text)
        has_urlsafe = any(ch in _URLSAFE_MARKERS for ch in text)
        if has_standard and has_urlsafe:
            raise EncodingError("Credential identifier mixes base64 and base64url alphabets")
        if has_standard:
            return CredentialEncoding.BASE64
        # No distinguishing characters: both alphabets agree, decode as URL-safe
        return CredentialEncoding.BASE64URL

    raise EncodingError(f"Unsupported credential identifier type: {type(value).__name__}")


def _byte_array_to_bytes(values) -> bytes:
    for item in values:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
            raise EncodingError("Credential identifier byte array contains an invalid byte value")
    return bytes(values)


def _text_to_bytes(text: str, encoding: CredentialEncoding) -> bytes:
    text = text.strip()
    if not text:
        raise EncodingError("Credential identifier is empty")
    if not _BASE64_TEXT.match(text):
        raise EncodingError("Credential identifier contains invalid characters")

    body = text.rstrip("=")
    if len(body) % 4 == 1:
        raise EncodingError("Credential identifier has an impossible base64 length")

    if encoding is CredentialEncoding.BASE64URL:
        return base64url_to_bytes(body)

    try:
        return base64.b64decode(body + "=" * (-len(body) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Credential identifier is not valid base64: {e}")


def _raw_bytes(value: Any) -> bytes:
    encoding = detect_encoding(value)

    if encoding is CredentialEncoding.RAW:
        raw = bytes(value)
    elif encoding is CredentialEncoding.BYTE_ARRAY:
        raw = _byte_array_to_bytes(value["data"] if isinstance(value, dict) else value)
    else:
        raw = _text_to_bytes(value, encoding)

    if not raw:
        raise EncodingError("Credential identifier is empty")
    return raw


def normalize(value: Any) -> CanonicalId:
    """Return the canonical (unpadded base64url) form of any accepted representation."""
    return CanonicalId(bytes_to_base64url(_raw_bytes(value)))


def to_bytes(canonical: CanonicalId | str) -> bytes:
    """Decode a canonical identifier back to raw bytes."""
    return _raw_bytes(canonical)


def same_identifier(a: Any, b: Any) -> bool:
    """Compare two identifiers by their canonical form. Undecodable input never matches."""
    try:
        return normalize(a) == normalize(b)
    except EncodingError as e:
        logger.debug(f"Identifier comparison skipped: {e.detail}")
        return False
