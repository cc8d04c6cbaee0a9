"""
Employee seed data (async, idempotent)
Run:  python scripts/seed/seed_employees.py
"""

import os, sys
import asyncio
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from attendance_api.core.database import async_session_maker
from attendance_api.db.init_db import create_tables
from attendance_api.db.seeds.employees import create_initial_employees


async def main():
    await create_tables()
    async with async_session_maker() as session:
        created = await create_initial_employees(session)
    print(f"✅ Employees seeded: {created} new")


if __name__ == "__main__":
    asyncio.run(main())
