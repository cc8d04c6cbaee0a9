from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from attendance_api.models.shared.enums import Base
from attendance_api.utils.time_helper import now_utc

class BaseModel(Base):
    """Base model with common fields"""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=now_utc)
