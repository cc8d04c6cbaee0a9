import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_api.api.dependencies import get_session_employee_id
from attendance_api.core.database import get_async_session
from attendance_api.schemas.hr.attendance_schema import AttendanceResponse, MonthlyReportResponse
from attendance_api.services.hr.attendance_service import AttendanceService

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/daily", response_model=List[AttendanceResponse])
async def get_daily_attendance(
    day: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD, server-local; defaults to today"),
    session: AsyncSession = Depends(get_async_session),
):
    """All attendance events of one calendar day, oldest first"""
    attendance_service = AttendanceService(session)
    return await attendance_service.get_daily_attendance(day)

@router.get("/history", response_model=List[AttendanceResponse])
async def get_attendance_history(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    employee_id: str = Depends(get_session_employee_id),
    session: AsyncSession = Depends(get_async_session),
):
    """Attendance of the session employee, current month by default"""
    attendance_service = AttendanceService(session)
    return await attendance_service.get_attendance_history(employee_id, start_date, end_date)

@router.get("/report", response_model=MonthlyReportResponse)
async def get_monthly_report(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=9999),
    employee_id: str = Depends(get_session_employee_id),
    session: AsyncSession = Depends(get_async_session),
):
    attendance_service = AttendanceService(session)
    return await attendance_service.generate_monthly_report(employee_id, month, year)
