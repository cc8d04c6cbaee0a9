from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from attendance_api.db.base import BaseModel

class Employee(BaseModel):
    __tablename__ = 'employees'

    employee_id = Column(String(20), unique=True, nullable=False, index=True)  # e.g. AFG-A001
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    department = Column(String(100))
    role = Column(String(100))
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    credentials = relationship("WebAuthnCredential", back_populates="employee")
    attendance_records = relationship("AttendanceRecord", back_populates="employee")
