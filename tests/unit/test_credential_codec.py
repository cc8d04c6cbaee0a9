import base64
import pytest

from attendance_api.core.exceptions import EncodingError
from attendance_api.models.shared.enums import CredentialEncoding
from attendance_api.utils.credential_codec import detect_encoding, normalize, same_identifier, to_bytes
from tests.support import CREDENTIAL_RAW_ID

STANDARD = base64.b64encode(CREDENTIAL_RAW_ID).decode()
URLSAFE_PADDED = base64.urlsafe_b64encode(CREDENTIAL_RAW_ID).decode()
URLSAFE = URLSAFE_PADDED.rstrip("=")


class TestDetectEncoding:
    def test_raw_bytes(self):
        assert detect_encoding(CREDENTIAL_RAW_ID) is CredentialEncoding.RAW
        assert detect_encoding(bytearray(CREDENTIAL_RAW_ID)) is CredentialEncoding.RAW
        assert detect_encoding(memoryview(CREDENTIAL_RAW_ID)) is CredentialEncoding.RAW

    def test_byte_arrays(self):
        assert detect_encoding(list(CREDENTIAL_RAW_ID)) is CredentialEncoding.BYTE_ARRAY
        assert detect_encoding({"type": "Buffer", "data": list(CREDENTIAL_RAW_ID)}) is CredentialEncoding.BYTE_ARRAY

    def test_text_alphabets(self):
        assert detect_encoding(STANDARD) is CredentialEncoding.BASE64
        assert detect_encoding(URLSAFE) is CredentialEncoding.BASE64URL
        # No alphabet-specific characters
        assert detect_encoding("QUJD") is CredentialEncoding.BASE64URL

    def test_mixed_alphabets_rejected(self):
        with pytest.raises(EncodingError):
            detect_encoding("ab+c-d")

    @pytest.mark.parametrize("value", [None, 42, 3.5, {"type": "Other", "data": [1]}])
    def test_unsupported_values(self, value):
        with pytest.raises(EncodingError):
            detect_encoding(value)


class TestNormalize:
    def test_every_representation_has_one_canonical_form(self):
        representations = [
            CREDENTIAL_RAW_ID,
            bytearray(CREDENTIAL_RAW_ID),
            list(CREDENTIAL_RAW_ID),
            {"type": "Buffer", "data": list(CREDENTIAL_RAW_ID)},
            STANDARD,
            STANDARD.rstrip("="),
            URLSAFE,
            URLSAFE_PADDED,
        ]
        assert {normalize(r) for r in representations} == {URLSAFE}

    def test_canonical_form_is_unpadded_urlsafe(self):
        canonical = normalize(STANDARD)
        assert "=" not in canonical
        assert "+" not in canonical and "/" not in canonical

    def test_to_bytes_inverts_normalize(self):
        assert to_bytes(normalize(STANDARD)) == CREDENTIAL_RAW_ID
        assert to_bytes(normalize({"type": "Buffer", "data": [1, 2, 3]})) == b"\x01\x02\x03"

    def test_normalize_is_idempotent(self):
        canonical = normalize(CREDENTIAL_RAW_ID)
        assert normalize(canonical) == canonical

    def test_surrounding_whitespace_ignored(self):
        assert normalize(f"  {URLSAFE}\n") == URLSAFE

    @pytest.mark.parametrize("value", ["", "   ", b"", [], "A", "abc$", "ab=cd", "abcd===", [256], [-1], [True]])
    def test_invalid_input_raises(self, value):
        with pytest.raises(EncodingError):
            normalize(value)


class TestSameIdentifier:
    def test_cross_encoding_match(self):
        assert same_identifier(STANDARD, URLSAFE)
        assert same_identifier(list(CREDENTIAL_RAW_ID), URLSAFE_PADDED)

    def test_different_bytes_do_not_match(self):
        assert not same_identifier(CREDENTIAL_RAW_ID, CREDENTIAL_RAW_ID + b"\x00")

    def test_undecodable_never_matches(self):
        assert not same_identifier("abc$", URLSAFE)
