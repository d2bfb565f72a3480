import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base

GLOBAL_CONFIG_KEY = "GLOBAL"


class TimetableWeek(str, Enum):
    A = "A"
    B = "B"


class TimetableConfig(Base):
    """Timetable structure for an academic year.

    The row keyed ``GLOBAL`` holds school-wide settings: its ``weeks`` value is the
    timetable cycle for every year. Year rows ("YYYY-YY") carry the period layout
    and an optional ``week_zero_date`` anchoring Week A.
    """

    __tablename__ = "timetable_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    academic_year: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    periods_per_day: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    days_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    week_zero_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    period_start: Mapped[int] = mapped_column(Integer, nullable=False)
    period_end: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[TimetableWeek | None] = mapped_column(SAEnum(TimetableWeek, name="timetable_week"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def duration(self) -> int:
        return self.period_end - self.period_start + 1
