import logging
from typing import Any, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from attendance_api.models.hr.employee import Employee

logger = logging.getLogger(__name__)

EMPLOYEES_SEED: List[Dict[str, Any]] = [
    {"employee_id": "AFG-A001", "name": "Adaeze Okafor", "email": "adaeze.okafor@africangroup.ng", "department": "Surveying", "role": "Surveyor"},
    {"employee_id": "AFG-B014", "name": "Tunde Bakare", "email": "tunde.bakare@africangroup.ng", "department": "Construction", "role": "Site Engineer"},
    {"employee_id": "AFG-C1203", "name": "Ngozi Eze", "email": "ngozi.eze@africangroup.ng", "department": "Real Estate", "role": "Property Manager"},
]

async def create_initial_employees(session: AsyncSession, employees: List[Dict[str, Any]] = EMPLOYEES_SEED) -> int:
    """Insert employees that do not exist yet. Returns the number created."""
    created = 0
    try:
        for data in employees:
            result = await session.execute(
                select(Employee).where(Employee.employee_id == data["employee_id"])
            )
            if result.scalar_one_or_none():
                continue
            session.add(Employee(**{"is_active": True, **data}))
            created += 1

        await session.commit()
        logger.info(f"✅ Seeded {created} employee(s)")
        return created

    except Exception as e:
        logger.error(f"❌ Error seeding employees: {str(e)}")
        await session.rollback()
        raise
