import logging
from typing import Any, Optional, List, Dict, Tuple
from datetime import date, datetime
from collections import defaultdict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_api.core.exceptions import ValidationError, ConcurrentAttendanceError, InternalError
from attendance_api.models.hr.attendance import AttendanceRecord
from attendance_api.models.shared.enums import AttendanceType, LocationType
from attendance_api.schemas.hr.attendance_schema import AttendanceCreate, AttendanceResponse, MonthlyReportResponse
from attendance_api.utils.time_helper import (
    business_days, day_bounds, ensure_utc, local_date, month_bounds, now_utc, range_bounds,
)

logger = logging.getLogger(__name__)

ATTENDANCE_TYPES = {t.value for t in AttendanceType}
LOCATION_TYPES = {l.value for l in LocationType}


def validate_location(location_type: Optional[str], latitude: Optional[float], longitude: Optional[float]) -> List[str]:
    """Location type membership, required coordinates and coordinate ranges."""
    errors: List[str] = []

    if location_type not in LOCATION_TYPES:
        errors.append("Invalid location type")
    elif LocationType(location_type).requires_coordinates:
        if latitude is None:
            errors.append("Latitude is required for site and office locations")
        if longitude is None:
            errors.append("Longitude is required for site and office locations")

    if latitude is not None and not -90 <= latitude <= 90:
        errors.append("Latitude must be between -90 and 90")
    if longitude is not None and not -180 <= longitude <= 180:
        errors.append("Longitude must be between -180 and 180")

    return errors


def validate_attendance(record: AttendanceCreate) -> List[str]:
    """Return every rule the record violates; empty when it can be persisted."""
    errors: List[str] = []

    if not record.employee_id:
        errors.append("Employee ID is required")
    if record.type not in ATTENDANCE_TYPES:
        errors.append("Invalid attendance type")
    errors.extend(validate_location(record.location_type, record.latitude, record.longitude))

    return errors


class AttendanceService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # region Create
    async def _next_sequence(self, employee_id: str, location_type: LocationType, attendance_date: date) -> int:
        result = await self.session.execute(
            select(func.max(AttendanceRecord.sequence)).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.location_type == location_type,
                AttendanceRecord.attendance_date == attendance_date,
            )
        )
        return (result.scalar() or 0) + 1

    async def create(self, record: AttendanceCreate) -> AttendanceRecord:
        """Validate and append one attendance event. Nothing is written on validation failure."""
        errors = validate_attendance(record)
        if errors:
            logger.warning(f"Rejected attendance record for {record.employee_id}: {errors}")
            raise ValidationError(errors)

        location_type = LocationType(record.location_type)
        timestamp = ensure_utc(record.timestamp) or now_utc()
        attendance_date = local_date(timestamp)

        try:
            sequence = await self._next_sequence(record.employee_id, location_type, attendance_date)
            attendance = AttendanceRecord(
                employee_id=record.employee_id,
                name=record.name,
                type=AttendanceType(record.type),
                timestamp=timestamp,
                attendance_date=attendance_date,
                sequence=sequence,
                location_type=location_type,
                site_id=record.site_id,
                latitude=record.latitude,
                longitude=record.longitude,
                address=record.address,
                notes=record.notes,
            )
            self.session.add(attendance)
            await self.session.commit()
            await self.session.refresh(attendance)

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                f"Attendance sequence collision for {record.employee_id} "
                f"({location_type.value}, {attendance_date}): {e.orig}"
            )
            raise ConcurrentAttendanceError()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating attendance record for {record.employee_id}: {e}")
            raise InternalError("Failed to record attendance")

        logger.info(
            f"Attendance recorded: {attendance.employee_id} {attendance.type.value} "
            f"at {attendance.location_type.value} (#{attendance.sequence} on {attendance.attendance_date})"
        )
        return attendance
    # endregion

    # region Queries
    async def find_by_date_range(
        self,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None,
        location_type: Optional[LocationType] = None,
    ) -> List[AttendanceRecord]:
        """Records with start <= timestamp < end, oldest first. No employee filter means everyone."""
        query = select(AttendanceRecord).where(
            AttendanceRecord.timestamp >= ensure_utc(start),
            AttendanceRecord.timestamp < ensure_utc(end),
        )
        if employee_id:
            query = query.where(AttendanceRecord.employee_id == employee_id)
        if location_type:
            query = query.where(AttendanceRecord.location_type == LocationType(location_type))
        query = query.order_by(AttendanceRecord.timestamp.asc(), AttendanceRecord.sequence.asc())

        try:
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching attendance between {start} and {end}: {e}")
            raise InternalError("Failed to fetch attendance records")

    async def get_daily_attendance(self, day: Optional[date] = None) -> List[AttendanceRecord]:
        start, end = day_bounds(day or local_date())
        return await self.find_by_date_range(start, end)

    async def get_attendance_history(
        self,
        employee_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[AttendanceRecord]:
        """Inclusive calendar-day range, defaulting to the current month."""
        today = local_date()
        month_start, month_end = month_bounds(today.year, today.month)
        start_date = start_date or month_start
        end_date = end_date or month_end
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")

        start, end = range_bounds(start_date, end_date)
        return await self.find_by_date_range(start, end, employee_id=employee_id)
    # endregion

    # region Reports
    @staticmethod
    def calculate_work_hours(records: List[AttendanceRecord]) -> float:
        """Pair each sign-in with the next sign-out on the same day and location type."""
        grouped: Dict[Tuple[date, Any], List[AttendanceRecord]] = defaultdict(list)
        for record in records:
            grouped[(record.attendance_date, record.location_type)].append(record)

        total_seconds = 0.0
        for day_records in grouped.values():
            day_records.sort(key=lambda r: (ensure_utc(r.timestamp), r.sequence))
            open_sign_in: Optional[datetime] = None
            for record in day_records:
                if record.type == AttendanceType.SIGN_IN:
                    open_sign_in = ensure_utc(record.timestamp)
                elif open_sign_in is not None:
                    total_seconds += (ensure_utc(record.timestamp) - open_sign_in).total_seconds()
                    open_sign_in = None

        return round(total_seconds / 3600, 2)

    async def generate_monthly_report(
        self,
        employee_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> MonthlyReportResponse:
        today = local_date()
        month = month or today.month
        year = year or today.year
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        first_day, last_day = month_bounds(year, month)
        records = await self.get_attendance_history(employee_id, first_day, last_day)

        sign_ins = [r for r in records if r.type == AttendanceType.SIGN_IN]
        sign_outs = [r for r in records if r.type == AttendanceType.SIGN_OUT]
        present_days = len({r.attendance_date for r in sign_ins})
        total_work_days = business_days(first_day, last_day)

        return MonthlyReportResponse(
            employee_id=employee_id,
            month=month,
            year=year,
            total_work_days=total_work_days,
            present_days=present_days,
            absent_days=max(total_work_days - present_days, 0),
            work_hours=self.calculate_work_hours(records),
            sign_ins=[AttendanceResponse.model_validate(r) for r in sign_ins],
            sign_outs=[AttendanceResponse.model_validate(r) for r in sign_outs],
        )
    # endregion
