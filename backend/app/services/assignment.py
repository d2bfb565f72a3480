from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import ResourceNotFoundError, SchedulerError, SchedulingValidationError
from app.db.session import transaction
from app.models.assignment import ModuleAssignment, ScheduledLesson
from app.models.module import Lesson, Module
from app.services.blackouts import expand_blocked_dates, load_blackouts
from app.services.lesson_placer import PlacementDirection, PlacementItem, place_sequentially
from app.services.lesson_queries import (
    get_teaching_class,
    load_class_lessons,
    require_class_slots,
    require_year_config,
)
from app.services.occupancy import OccupancyTracker
from app.services.week_parity import (
    build_week_parity,
    get_timetable_weeks_config,
    iso_weekday,
    to_utc_day,
    utc_today,
)

logger = logging.getLogger(__name__)


def find_next_available_slot(
    db: Session,
    class_id: str,
    from_date: date | None = None,
    *,
    settings: Settings | None = None,
) -> date:
    """Earliest day on or after ``from_date`` with a matching slot and no lesson yet for the class."""
    settings = settings or get_settings()
    teaching_class = get_teaching_class(db, class_id)
    require_year_config(db, teaching_class.academic_year)
    slots = require_class_slots(db, class_id)

    search_start = to_utc_day(from_date) if from_date is not None else utc_today()
    week_cycle = get_timetable_weeks_config(db)
    parity = build_week_parity(
        db,
        mode=settings.week_parity_mode,
        academic_year=teaching_class.academic_year,
        operation_start=search_start,
    )
    occupied_days = OccupancyTracker.from_lessons(
        load_class_lessons(db, class_id, on_or_after=search_start)
    ).occupied_days()
    blocked = expand_blocked_dates(load_blackouts(db, ending_on_or_after=search_start))

    for offset in range(settings.assignment_search_days):
        candidate = search_start + timedelta(days=offset)
        if candidate in blocked or candidate in occupied_days:
            continue
        weekday = iso_weekday(candidate)
        for slot in slots:
            if slot.day != weekday:
                continue
            if week_cycle == 2 and slot.week is not None and slot.week != parity.label_for(candidate):
                continue
            return candidate

    raise SchedulerError(
        "Could not find an available slot within the next year",
        details={"class_id": class_id, "from_date": search_start.isoformat()},
    )


def assign_module_to_class(
    db: Session,
    *,
    class_id: str,
    module_id: str,
    start_date: date | None = None,
    settings: Settings | None = None,
) -> str:
    """Copy a module's lessons onto a class's timetable and return the new assignment id.

    Nothing is written unless every lesson finds a slot.
    """
    settings = settings or get_settings()
    teaching_class = get_teaching_class(db, class_id)
    if db.get(Module, module_id) is None:
        raise ResourceNotFoundError("Module", module_id)
    require_year_config(db, teaching_class.academic_year)
    slots = require_class_slots(db, class_id)

    lessons = list(
        db.execute(select(Lesson).where(Lesson.module_id == module_id).order_by(Lesson.order)).scalars()
    )
    if not lessons:
        raise SchedulingValidationError("Module has no lessons to schedule", details={"module_id": module_id})

    if start_date is not None:
        actual_start = to_utc_day(start_date)
    else:
        actual_start = find_next_available_slot(db, class_id, utc_today(), settings=settings)

    occupancy = OccupancyTracker.from_lessons(load_class_lessons(db, class_id, on_or_after=actual_start))
    blocked = expand_blocked_dates(load_blackouts(db))
    placements = place_sequentially(
        [PlacementItem(id=lesson.id, title=lesson.title, duration=lesson.duration) for lesson in lessons],
        slots,
        start=actual_start,
        direction=PlacementDirection.forward,
        blocked_dates=blocked,
        week_cycle=get_timetable_weeks_config(db),
        parity=build_week_parity(
            db,
            mode=settings.week_parity_mode,
            academic_year=teaching_class.academic_year,
            operation_start=actual_start,
        ),
        occupancy=occupancy,
        max_days=settings.assignment_search_days,
    )

    with transaction(db):
        assignment = ModuleAssignment(class_id=class_id, module_id=module_id, start_date=actual_start)
        db.add(assignment)
        db.flush()
        assignment_id = assignment.id
        for lesson, placement in zip(lessons, placements):
            db.add(
                ScheduledLesson(
                    assignment_id=assignment_id,
                    lesson_id=lesson.id,
                    calendar_date=placement.day,
                    timetable_slot_id=placement.slot_id,
                    title=lesson.title,
                    content=lesson.content,
                    duration=lesson.duration,
                    order=lesson.order,
                )
            )

    logger.info(
        "Assigned module %s to class %s from %s (%d lesson(s), last on %s)",
        module_id,
        class_id,
        actual_start.isoformat(),
        len(placements),
        placements[-1].day.isoformat(),
    )
    return assignment_id
