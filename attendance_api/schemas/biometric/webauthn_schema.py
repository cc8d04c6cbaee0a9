# attendance_api/schemas/biometric/webauthn_schema.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

# Request fields stay optional: the ceremonies report every missing field at once.

class CamelModel(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"

class EmployeeLookupRequest(BaseModel):
    employee_id: Optional[str] = Field(None, description="Employee ID, e.g. AFG-A001")

class RegistrationOptionsRequest(CamelModel):
    employee_id: Optional[str] = Field(None, alias="employeeId")

class RegistrationVerifyRequest(CamelModel):
    employee_id: Optional[str] = Field(None, alias="employeeId")
    challenge: Optional[str] = None
    id: Optional[str] = None
    raw_id: Optional[str] = Field(None, alias="rawId")
    type: Optional[str] = "public-key"
    response: Dict[str, Any] = {}
    authenticator_attachment: Optional[str] = Field(None, alias="authenticatorAttachment")
    client_extension_results: Dict[str, Any] = Field(default_factory=dict, alias="clientExtensionResults")

    def credential(self) -> Dict[str, Any]:
        """Client credential in its WebAuthn JSON shape."""
        return {
            "id": self.id,
            "rawId": self.raw_id,
            "type": self.type,
            "response": self.response,
            "authenticatorAttachment": self.authenticator_attachment,
            "clientExtensionResults": self.client_extension_results,
        }

class RegistrationVerifyResponse(BaseModel):
    success: bool = True
    credentialId: str

class AuthenticationOptionsRequest(CamelModel):
    employee_id: Optional[str] = Field(None, alias="employeeId")
    type: Optional[str] = Field(None, description="sign-in or sign-out")
    location_type: Optional[str] = Field(None, alias="locationType")

class AuthenticationVerifyRequest(CamelModel):
    employee_id: Optional[str] = Field(None, alias="employeeId")
    challenge: Optional[str] = None
    id: Optional[str] = None
    raw_id: Optional[str] = Field(None, alias="rawId")
    type: Optional[str] = "public-key"
    response: Dict[str, Any] = {}
    authenticator_attachment: Optional[str] = Field(None, alias="authenticatorAttachment")
    client_extension_results: Dict[str, Any] = Field(default_factory=dict, alias="clientExtensionResults")
    authentication_type: Optional[str] = Field(None, alias="authenticationType")
    location_type: Optional[str] = Field(None, alias="locationType")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    site_id: Optional[str] = Field(None, alias="siteId")
    address: Optional[str] = None
    notes: Optional[str] = None

    def assertion(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rawId": self.raw_id,
            "type": self.type,
            "response": self.response,
            "authenticatorAttachment": self.authenticator_attachment,
            "clientExtensionResults": self.client_extension_results,
        }

class AuthenticationVerifyResponse(BaseModel):
    success: bool = True
    type: str
    message: str
    timestamp: datetime

class CredentialInfo(BaseModel):
    credId: str
    publicKey: str
    prevCounter: int
    platform: Optional[str] = None
    createdAt: Optional[str] = None
    lastUsed: Optional[str] = None

class EmployeeLookupResponse(BaseModel):
    user: Dict[str, Any]
    credentials: List[CredentialInfo] = []
