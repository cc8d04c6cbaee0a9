from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from attendance_api.db.base import BaseModel

class WebAuthnCredential(BaseModel):
    __tablename__ = 'webauthn_credentials'

    employee_id = Column(String(20), ForeignKey('employees.employee_id'), nullable=False, index=True)
    credential_id = Column(String(1024), nullable=False, unique=True)  # unpadded base64url
    public_key = Column(Text, nullable=False)  # COSE key, unpadded base64url
    sign_count = Column(Integer, nullable=False, default=0)
    aaguid = Column(String(64))
    platform = Column(String(20))
    last_used_at = Column(DateTime(timezone=True))

    # Relationships
    employee = relationship("Employee", back_populates="credentials")
