import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from attendance_api.models.hr.attendance import AttendanceRecord
from attendance_api.models.shared.enums import AttendanceType, LocationType
from attendance_api.services.hr.attendance_service import AttendanceService
from attendance_api.utils.time_helper import day_bounds, ensure_utc, local_date, now_utc

logger = logging.getLogger(__name__)


@dataclass
class ResolverStats:
    """Process-wide count of classifications that fell back to sign-in."""
    fallback_count: int = 0
    last_fallback_at: Optional[datetime] = None

    def record_fallback(self) -> None:
        self.fallback_count += 1
        self.last_fallback_at = now_utc()


resolver_stats = ResolverStats()


def next_attendance_type(records: Iterable[AttendanceRecord]) -> AttendanceType:
    """Flip the latest event type; no prior event means sign-in."""
    records = list(records)
    if not records:
        return AttendanceType.SIGN_IN

    latest = max(records, key=lambda r: (ensure_utc(r.timestamp), r.sequence or 0))
    if AttendanceType(latest.type) == AttendanceType.SIGN_IN:
        return AttendanceType.SIGN_OUT
    return AttendanceType.SIGN_IN


class AttendanceTypeResolver:
    def __init__(self, attendance_service: AttendanceService, stats: ResolverStats = resolver_stats):
        self.attendance_service = attendance_service
        self.stats = stats

    async def resolve(
        self,
        employee_id: str,
        location_type: LocationType | str,
        now: Optional[datetime] = None,
    ) -> AttendanceType:
        """Decide the next event type from today's records at this location type."""
        try:
            location_type = LocationType(location_type)
            start, end = day_bounds(local_date(now))
            todays_records = await self.attendance_service.find_by_date_range(
                start, end, location_type=location_type
            )
            own_records = [r for r in todays_records if r.employee_id == employee_id]
            return next_attendance_type(own_records)
        except Exception as e:
            # Fail open on classification only; persistence errors still propagate
            self.stats.record_fallback()
            logger.warning(
                f"Attendance type lookup failed for {employee_id} at {location_type}, "
                f"defaulting to sign-in (fallbacks so far: {self.stats.fallback_count}): {e}"
            )
            return AttendanceType.SIGN_IN
