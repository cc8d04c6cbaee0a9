from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey, Enum as SQLEnum, Date, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from attendance_api.db.base import BaseModel
from attendance_api.models.shared.enums import AttendanceType, LocationType, enum_values

class AttendanceRecord(BaseModel):
    """Append-only attendance event. Never updated after insert."""
    __tablename__ = 'attendance_records'
    __table_args__ = (
        # Serializes the read-decide-write of concurrent ceremonies for one employee/location/day
        UniqueConstraint(
            'employee_id', 'location_type', 'attendance_date', 'sequence',
            name='uq_attendance_employee_location_day_sequence',
        ),
        Index('ix_attendance_records_timestamp', 'timestamp'),
    )

    employee_id = Column(String(20), ForeignKey('employees.employee_id'), nullable=False, index=True)
    name = Column(String(200))
    type = Column(
        SQLEnum(AttendanceType, name='attendance_type', values_callable=enum_values),
        nullable=False,
    )
    timestamp = Column(DateTime(timezone=True), nullable=False)
    attendance_date = Column(Date, nullable=False)  # server-local calendar day of `timestamp`
    sequence = Column(Integer, nullable=False, default=1)
    location_type = Column(
        SQLEnum(LocationType, name='location_type', values_callable=enum_values),
        nullable=False,
    )
    site_id = Column(String(100))
    latitude = Column(Numeric(10, 8, asdecimal=False))
    longitude = Column(Numeric(11, 8, asdecimal=False))
    address = Column(Text)
    notes = Column(Text)

    # Relationships
    employee = relationship("Employee", back_populates="attendance_records")
