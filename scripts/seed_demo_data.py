"""Seed a demo physics class with a timetable, a module and this year's holidays.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
from datetime import date

from sqlalchemy import select

from app.db.bootstrap import ensure_schema
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.module import Lesson, Module
from app.models.teaching_class import TeachingClass
from app.models.timetable import TimetableConfig, TimetableSlot
from app.services.academic_year import current_academic_year
from app.services.assignment import assign_module_to_class
from app.services.calendar_events import seed_term_dates
from app.services.school_weeks import get_school_week_cache

ACADEMIC_YEAR = os.getenv("DEMO_ACADEMIC_YEAR", "").strip() or current_academic_year()
CLASS_NAME = "11X/Ph1"

# (day, period_start, period_end)
DEMO_SLOTS = [(1, 2, 2), (3, 4, 5), (5, 1, 1)]

DEMO_LESSONS = [
    ("Speed and velocity", 1),
    ("Distance-time graphs", 1),
    ("Acceleration practical", 2),
    ("Velocity-time graphs", 1),
    ("Newton's first law", 1),
    ("Newton's second law practical", 2),
    ("Momentum", 1),
]


def _upsert_class(db) -> TeachingClass:
    teaching_class = db.execute(
        select(TeachingClass).where(
            TeachingClass.name == CLASS_NAME,
            TeachingClass.academic_year == ACADEMIC_YEAR,
        )
    ).scalar_one_or_none()
    if teaching_class is not None:
        return teaching_class
    teaching_class = TeachingClass(name=CLASS_NAME, year_group=11, academic_year=ACADEMIC_YEAR, room="S4")
    db.add(teaching_class)
    db.flush()
    for day, period_start, period_end in DEMO_SLOTS:
        db.add(TimetableSlot(class_id=teaching_class.id, day=day, period_start=period_start, period_end=period_end))
    if db.execute(select(TimetableConfig).where(TimetableConfig.academic_year == ACADEMIC_YEAR)).first() is None:
        db.add(TimetableConfig(academic_year=ACADEMIC_YEAR))
    db.commit()
    return teaching_class


def _create_module(db) -> Module:
    course = Course(name="GCSE Physics")
    db.add(course)
    db.flush()
    module = Module(course_id=course.id, name="Forces and Motion")
    db.add(module)
    db.flush()
    for order, (title, duration) in enumerate(DEMO_LESSONS):
        db.add(Lesson(module_id=module.id, title=title, duration=duration, order=order))
    db.commit()
    return module


def main() -> None:
    ensure_schema()
    with SessionLocal() as db:
        seed_term_dates(db, ACADEMIC_YEAR, cache=get_school_week_cache())
        teaching_class = _upsert_class(db)
        module = _create_module(db)
        start_year = int(ACADEMIC_YEAR.split("-")[0])
        assignment_id = assign_module_to_class(
            db,
            class_id=teaching_class.id,
            module_id=module.id,
            start_date=date(start_year, 9, 1),
        )
        print(f"Class {teaching_class.name} ({teaching_class.id}) assigned module {module.name}: {assignment_id}")


if __name__ == "__main__":
    main()
