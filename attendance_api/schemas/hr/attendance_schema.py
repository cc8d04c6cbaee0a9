from pydantic import BaseModel, validator, Field
from typing import Optional, List
from datetime import date, datetime
from attendance_api.models.shared.enums import AttendanceType, LocationType
from attendance_api.utils.time_helper import ensure_utc

class AttendanceCreate(BaseModel):
    """Unvalidated attendance event; the store checks enum membership and coordinates."""
    employee_id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    location_type: Optional[str] = None
    timestamp: Optional[datetime] = None
    site_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class AttendanceResponse(BaseModel):
    id: int
    employee_id: str
    name: Optional[str] = None
    type: AttendanceType
    timestamp: datetime
    attendance_date: date
    sequence: int
    location_type: LocationType
    site_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @validator("timestamp", "created_at")
    def as_utc(cls, v):
        return ensure_utc(v)

    class Config:
        from_attributes = True

class MonthlyReportResponse(BaseModel):
    employee_id: str
    month: int = Field(..., ge=1, le=12)
    year: int
    total_work_days: int
    present_days: int
    absent_days: int
    work_hours: float
    sign_ins: List[AttendanceResponse] = []
    sign_outs: List[AttendanceResponse] = []
