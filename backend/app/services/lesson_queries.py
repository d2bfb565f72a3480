from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, SchedulingValidationError
from app.models.assignment import ModuleAssignment, ScheduledLesson
from app.models.teaching_class import TeachingClass
from app.models.timetable import TimetableConfig, TimetableSlot
from app.services.lesson_placer import PlacementItem, SlotInfo


def class_lessons_query(class_id: str) -> Select:
    return (
        select(ScheduledLesson)
        .join(ModuleAssignment, ModuleAssignment.id == ScheduledLesson.assignment_id)
        .where(ModuleAssignment.class_id == class_id)
    )


def load_class_lessons(
    db: Session,
    class_id: str,
    *,
    on_or_after: date | None = None,
    on_or_before: date | None = None,
    after: date | None = None,
) -> list[ScheduledLesson]:
    query = class_lessons_query(class_id)
    if on_or_after is not None:
        query = query.where(ScheduledLesson.calendar_date >= on_or_after)
    if on_or_before is not None:
        query = query.where(ScheduledLesson.calendar_date <= on_or_before)
    if after is not None:
        query = query.where(ScheduledLesson.calendar_date > after)
    query = query.order_by(ScheduledLesson.calendar_date, ScheduledLesson.order)
    return list(db.execute(query).scalars())


def class_id_for_lesson(db: Session, lesson: ScheduledLesson) -> str:
    assignment = db.get(ModuleAssignment, lesson.assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Module assignment", lesson.assignment_id)
    return assignment.class_id


def get_teaching_class(db: Session, class_id: str) -> TeachingClass:
    teaching_class = db.get(TeachingClass, class_id)
    if teaching_class is None:
        raise ResourceNotFoundError("Class", class_id)
    return teaching_class


def find_year_config(db: Session, academic_year: str) -> TimetableConfig | None:
    return db.execute(
        select(TimetableConfig).where(TimetableConfig.academic_year == academic_year)
    ).scalar_one_or_none()


def require_year_config(db: Session, academic_year: str) -> TimetableConfig:
    config = find_year_config(db, academic_year)
    if config is None:
        raise SchedulingValidationError(
            "Timetable configuration not found for academic year",
            details={"academic_year": academic_year},
        )
    return config


def load_class_slots(db: Session, class_id: str) -> list[SlotInfo]:
    slots = db.execute(
        select(TimetableSlot)
        .where(TimetableSlot.class_id == class_id)
        .order_by(TimetableSlot.day, TimetableSlot.period_start)
    ).scalars()
    return [SlotInfo.from_model(slot) for slot in slots]


def require_class_slots(db: Session, class_id: str) -> list[SlotInfo]:
    slots = load_class_slots(db, class_id)
    if not slots:
        raise SchedulingValidationError("Class has no timetable slots configured", details={"class_id": class_id})
    return slots


def placement_items(lessons: Iterable[ScheduledLesson]) -> list[PlacementItem]:
    return [PlacementItem(id=lesson.id, title=lesson.title, duration=lesson.duration) for lesson in lessons]
