import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from attendance_api.core.exceptions import ValidationError, NotFoundError, InternalError
from attendance_api.models.hr.employee import Employee
from attendance_api.utils.validators.employee_validators import EmployeeIdValidator

logger = logging.getLogger(__name__)

class EmployeeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        try:
            result = await self.session.execute(
                select(Employee).where(Employee.employee_id == employee_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching employee {employee_id}: {e}")
            raise InternalError("Failed to fetch employee")

    async def get_active_employee(self, employee_id: str) -> Employee:
        """Return an active employee or raise NotFoundError."""
        employee = await self.get_by_employee_id(employee_id)
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")
        return employee

    async def lookup(self, employee_id: str) -> Employee:
        """Validate the ID format, then fetch the active employee."""
        employee_id = (employee_id or "").strip()
        if not EmployeeIdValidator.is_valid(employee_id):
            raise ValidationError("Invalid employee ID format")
        return await self.get_active_employee(employee_id)

    @staticmethod
    def format_employee(employee: Employee) -> Dict[str, Any]:
        return {
            "employeeId": employee.employee_id,
            "name": employee.name,
            "email": employee.email,
            "department": employee.department,
            "role": employee.role,
        }
