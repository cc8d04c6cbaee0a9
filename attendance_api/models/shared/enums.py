from sqlalchemy.orm import declarative_base
from enum import Enum

Base = declarative_base()

# Enums
class AttendanceType(str, Enum):
    SIGN_IN = "sign-in"
    SIGN_OUT = "sign-out"

class LocationType(str, Enum):
    OFFICE = "office"
    SITE = "site"
    REMOTE = "remote"

    @property
    def requires_coordinates(self) -> bool:
        return self in (LocationType.OFFICE, LocationType.SITE)

class ClientPlatform(str, Enum):
    ANDROID = "android"
    IOS = "ios"

class CredentialEncoding(str, Enum):
    """Wire representations a credential identifier can arrive in."""
    RAW = "raw"                  # bytes / bytearray / memoryview
    BYTE_ARRAY = "byte_array"    # [1, 2, 3] or {"type": "Buffer", "data": [...]}
    BASE64 = "base64"            # standard alphabet, '+' and '/'
    BASE64URL = "base64url"      # URL-safe alphabet, '-' and '_'


def enum_values(enum_cls):
    """Persist enum values ("sign-in") instead of member names ("SIGN_IN")."""
    return [member.value for member in enum_cls]

class CeremonyType(str, Enum):
    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"
