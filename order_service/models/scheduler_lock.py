from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class SchedulerLock(SQLModel, table=True):
    """One row per named lock, shared by every instance of the service."""

    __tablename__ = "scheduler_lock"

    name: str = Field(primary_key=True, max_length=64)
    lock_until: datetime = Field(sa_type=DateTime(timezone=True))
    locked_at: datetime = Field(sa_type=DateTime(timezone=True))
    locked_by: str = Field(max_length=255)
