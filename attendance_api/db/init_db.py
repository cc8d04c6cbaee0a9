import logging
from sqlalchemy.ext.asyncio import AsyncEngine
from attendance_api.core.database import engine
from attendance_api.models import *  # Import all models
from attendance_api.models.shared.enums import Base

logger = logging.getLogger(__name__)

async def create_tables(bind: AsyncEngine = engine):
    """Create all database tables"""
    try:
        async with bind.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("✅ Database tables created successfully")

    except Exception as e:
        logger.error(f"❌ Error creating tables: {str(e)}")
        raise
