from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceInUseError, ResourceNotFoundError, SchedulingValidationError
from app.db.session import transaction
from app.models.assignment import ModuleAssignment, ScheduledLesson
from app.models.course import Course
from app.models.module import Lesson, Module
from app.models.teaching_class import TeachingClass
from app.schemas.course import CourseUpdate, LessonUpdate, ModuleUpdate

logger = logging.getLogger(__name__)


def _apply(db: Session, target, data: dict):
    with transaction(db):
        for key, value in data.items():
            setattr(target, key, value)
    db.refresh(target)
    return target


def update_course(db: Session, course_id: str, payload: CourseUpdate) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return _apply(db, course, payload.model_dump(exclude_unset=True))


def delete_course(db: Session, course_id: str) -> None:
    """Delete a course with its modules and lesson templates.

    Classes following the course are detached from it. A course whose modules
    have been assigned to a class cannot be deleted.
    """
    course = db.get(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)

    module_ids = list(db.execute(select(Module.id).where(Module.course_id == course_id)).scalars())
    if module_ids:
        assigned = db.execute(
            select(func.count(ModuleAssignment.id)).where(ModuleAssignment.module_id.in_(module_ids))
        ).scalar_one()
        if assigned:
            raise ResourceInUseError(
                "Course has modules assigned to classes",
                details={"course_id": course_id, "assignments": assigned},
            )

    with transaction(db):
        if module_ids:
            for lesson in db.execute(select(Lesson).where(Lesson.module_id.in_(module_ids))).scalars():
                db.delete(lesson)
            for module in db.execute(select(Module).where(Module.id.in_(module_ids))).scalars():
                db.delete(module)
        db.execute(update(TeachingClass).where(TeachingClass.course_id == course_id).values(course_id=None))
        db.delete(course)
    logger.info("Deleted course %s with %d modules", course_id, len(module_ids))


def update_module(db: Session, module_id: str, payload: ModuleUpdate) -> Module:
    module = db.get(Module, module_id)
    if module is None:
        raise ResourceNotFoundError("Module", module_id)
    return _apply(db, module, payload.model_dump(exclude_unset=True))


def update_lesson(db: Session, lesson_id: str, payload: LessonUpdate) -> Lesson:
    # Scheduled copies keep their snapshot; only future assignments see the edit.
    lesson = db.get(Lesson, lesson_id)
    if lesson is None:
        raise ResourceNotFoundError("Lesson", lesson_id)
    return _apply(db, lesson, payload.model_dump(exclude_unset=True))


def delete_lesson(db: Session, lesson_id: str) -> None:
    lesson = db.get(Lesson, lesson_id)
    if lesson is None:
        raise ResourceNotFoundError("Lesson", lesson_id)

    scheduled = db.execute(
        select(func.count(ScheduledLesson.id)).where(ScheduledLesson.lesson_id == lesson_id)
    ).scalar_one()
    if scheduled:
        raise ResourceInUseError(
            "Lesson has been scheduled for a class",
            details={"lesson_id": lesson_id, "scheduled_lessons": scheduled},
        )

    with transaction(db):
        db.execute(
            update(Lesson)
            .where(Lesson.module_id == lesson.module_id, Lesson.order > lesson.order)
            .values(order=Lesson.order - 1)
        )
        db.delete(lesson)


def reorder_lessons(db: Session, module_id: str, lesson_ids: list[str]) -> list[Lesson]:
    """Set lesson order to the position of each id in ``lesson_ids``.

    The ids must be exactly the module's lessons, each listed once.
    """
    if db.get(Module, module_id) is None:
        raise ResourceNotFoundError("Module", module_id)

    lessons = {
        lesson.id: lesson
        for lesson in db.execute(select(Lesson).where(Lesson.module_id == module_id)).scalars()
    }
    if len(lesson_ids) != len(lessons) or set(lesson_ids) != set(lessons):
        raise SchedulingValidationError("Invalid lesson IDs", details={"module_id": module_id})

    with transaction(db):
        for index, lesson_id in enumerate(lesson_ids):
            lessons[lesson_id].order = index
    return [lessons[lesson_id] for lesson_id in lesson_ids]
