from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import ResourceNotFoundError
from app.db.session import transaction
from app.models.assignment import ScheduledLesson
from app.schemas.scheduling import PushDirection, PushResult, ScheduleChange
from app.services.blackouts import expand_blocked_dates, load_blackouts
from app.services.lesson_placer import PlacementDirection, place_sequentially
from app.services.lesson_queries import (
    class_id_for_lesson,
    get_teaching_class,
    load_class_lessons,
    load_class_slots,
    placement_items,
)
from app.services.occupancy import OccupancyTracker
from app.services.week_parity import build_week_parity, get_timetable_weeks_config, to_utc_day

logger = logging.getLogger(__name__)


def push_lesson(
    db: Session,
    *,
    lesson_id: str,
    direction: PushDirection,
    preview: bool = False,
    settings: Settings | None = None,
) -> PushResult:
    """Move a scheduled lesson to its next (or previous) free slot and cascade the shift.

    Pushing forward re-seats the lesson and every lesson of the class dated on or after
    it, starting the day after its current date. Pushing back re-seats it and every
    earlier lesson, walking backwards from the day before. Only lessons whose date or
    slot changes are reported, and in preview mode nothing is written.
    """
    settings = settings or get_settings()
    target = db.get(ScheduledLesson, lesson_id)
    if target is None:
        raise ResourceNotFoundError("Scheduled lesson", lesson_id)

    class_id = class_id_for_lesson(db, target)
    teaching_class = get_teaching_class(db, class_id)
    slots = load_class_slots(db, class_id)
    week_cycle = get_timetable_weeks_config(db)
    blocked = expand_blocked_dates(load_blackouts(db))

    target_day = to_utc_day(target.calendar_date)
    if direction == "forward":
        to_reschedule = load_class_lessons(db, class_id, on_or_after=target_day)
        staying = load_class_lessons(db, class_id, on_or_before=target_day)
        search_start = target_day + timedelta(days=1)
        placement_direction = PlacementDirection.forward
    else:
        to_reschedule = load_class_lessons(db, class_id, on_or_before=target_day)
        staying = load_class_lessons(db, class_id, on_or_after=target_day)
        search_start = target_day - timedelta(days=1)
        placement_direction = PlacementDirection.backward

    if not to_reschedule:
        return PushResult(lessons_affected=0)

    rescheduled_ids = {lesson.id for lesson in to_reschedule}
    occupancy = OccupancyTracker.from_lessons(staying, exclude_ids=rescheduled_ids)
    placements = place_sequentially(
        placement_items(to_reschedule),
        slots,
        start=search_start,
        direction=placement_direction,
        blocked_dates=blocked,
        week_cycle=week_cycle,
        parity=build_week_parity(
            db,
            mode=settings.week_parity_mode,
            academic_year=teaching_class.academic_year,
            operation_start=search_start,
        ),
        occupancy=occupancy,
        max_days=settings.cascade_search_days,
    )

    changes: list[ScheduleChange] = []
    moved: list[tuple[ScheduledLesson, ScheduleChange]] = []
    for lesson, placement in zip(to_reschedule, placements):
        old_day = to_utc_day(lesson.calendar_date)
        if old_day == placement.day and lesson.timetable_slot_id == placement.slot_id:
            continue
        change = ScheduleChange(
            lesson_id=lesson.id,
            title=lesson.title,
            old_date=old_day,
            new_date=placement.day,
            old_slot_id=lesson.timetable_slot_id,
            new_slot_id=placement.slot_id,
        )
        changes.append(change)
        moved.append((lesson, change))

    if not preview and moved:
        with transaction(db):
            for lesson, change in moved:
                lesson.calendar_date = change.new_date
                lesson.timetable_slot_id = change.new_slot_id
        logger.info(
            "Pushed lesson %s %s for class %s; %d lesson(s) moved",
            lesson_id,
            direction,
            class_id,
            len(moved),
        )

    return PushResult(
        lessons_affected=len(changes),
        affected_lesson_ids=[change.lesson_id for change in changes],
        changes=changes,
    )
