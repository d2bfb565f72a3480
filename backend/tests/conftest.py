import os

# Point the module-level engine at SQLite before anything imports app.db.session.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, select  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.api.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.assignment import ModuleAssignment, ScheduledLesson  # noqa: E402
from app.models.calendar_event import CalendarEvent, CalendarEventType  # noqa: E402
from app.models.course import Course  # noqa: E402
from app.models.module import Lesson, Module  # noqa: E402
from app.models.teaching_class import TeachingClass  # noqa: E402
from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableConfig, TimetableSlot, TimetableWeek  # noqa: E402
from app.services.school_weeks import get_school_week_cache  # noqa: E402

ACADEMIC_YEAR = "2024-25"
WEEKDAYS = (1, 2, 3, 4, 5)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    get_school_week_cache().invalidate()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_school_week_cache().invalidate()


class PlannerFactory:
    """Builds classes, timetables and modules directly in the database."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def year_config(self, academic_year: str = ACADEMIC_YEAR, *, week_zero_date: date | None = None) -> TimetableConfig:
        config = TimetableConfig(academic_year=academic_year, week_zero_date=week_zero_date)
        self.db.add(config)
        self.db.commit()
        return config

    def week_cycle(self, weeks: int) -> TimetableConfig:
        config = self.db.execute(
            select(TimetableConfig).where(TimetableConfig.academic_year == GLOBAL_CONFIG_KEY)
        ).scalar_one_or_none()
        if config is None:
            config = TimetableConfig(academic_year=GLOBAL_CONFIG_KEY)
            self.db.add(config)
        config.weeks = weeks
        self.db.commit()
        return config

    def teaching_class(
        self,
        slots=(),
        *,
        name: str = "11X/Ph1",
        academic_year: str = ACADEMIC_YEAR,
        with_config: bool = True,
    ) -> TeachingClass:
        """``slots`` holds (day, period_start, period_end) or (day, period_start, period_end, week)."""
        if with_config and self.db.execute(
            select(TimetableConfig).where(TimetableConfig.academic_year == academic_year)
        ).scalar_one_or_none() is None:
            self.year_config(academic_year)
        teaching_class = TeachingClass(name=name, year_group=11, academic_year=academic_year)
        self.db.add(teaching_class)
        self.db.flush()
        for slot in slots:
            day, period_start, period_end = slot[:3]
            week = TimetableWeek(slot[3]) if len(slot) > 3 and slot[3] else None
            self.db.add(
                TimetableSlot(
                    class_id=teaching_class.id,
                    day=day,
                    period_start=period_start,
                    period_end=period_end,
                    week=week,
                )
            )
        self.db.commit()
        return teaching_class

    def module(self, lessons=(), *, name: str = "Forces and Motion") -> Module:
        """``lessons`` holds (title, duration) pairs in teaching order."""
        course = Course(name="GCSE Physics")
        self.db.add(course)
        self.db.flush()
        module = Module(course_id=course.id, name=name)
        self.db.add(module)
        self.db.flush()
        for order, (title, duration) in enumerate(lessons):
            self.db.add(
                Lesson(module_id=module.id, title=title, content=f"Notes for {title}", duration=duration, order=order)
            )
        self.db.commit()
        return module

    def single_lessons(self, count: int, *, prefix: str = "Lesson") -> Module:
        return self.module([(f"{prefix} {index}", 1) for index in range(1, count + 1)])

    def event(
        self,
        start_date: date,
        end_date: date | None = None,
        *,
        type: CalendarEventType = CalendarEventType.holiday,
        title: str = "Holiday",
    ) -> CalendarEvent:
        event = CalendarEvent(type=type, title=title, start_date=start_date, end_date=end_date or start_date)
        self.db.add(event)
        self.db.commit()
        return event

    def slot_id(self, class_id: str, day: int, period_start: int = 1) -> str:
        return self.db.execute(
            select(TimetableSlot.id).where(
                TimetableSlot.class_id == class_id,
                TimetableSlot.day == day,
                TimetableSlot.period_start == period_start,
            )
        ).scalar_one()

    def lessons_for_class(self, class_id: str) -> list[ScheduledLesson]:
        self.db.expire_all()
        return list(
            self.db.execute(
                select(ScheduledLesson)
                .join(ModuleAssignment, ModuleAssignment.id == ScheduledLesson.assignment_id)
                .where(ModuleAssignment.class_id == class_id)
                .order_by(ScheduledLesson.calendar_date, ScheduledLesson.order)
            ).scalars()
        )


@pytest.fixture()
def planner(db):
    return PlannerFactory(db)


@pytest.fixture()
def weekday_class(planner):
    """Class with one single period every weekday."""
    return planner.teaching_class([(day, 1, 1) for day in WEEKDAYS])
