from __future__ import annotations

import logging
from collections import defaultdict
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import ResourceNotFoundError
from app.db.session import transaction
from app.models.assignment import ModuleAssignment, ScheduledLesson
from app.models.calendar_event import CalendarEvent
from app.models.teaching_class import TeachingClass
from app.schemas.scheduling import RescheduleResult, ScheduleChange
from app.services.blackouts import Blackout, expand_blocked_dates, load_blackouts
from app.services.lesson_placer import PlacementDirection, place_sequentially
from app.services.lesson_queries import find_year_config, load_class_lessons, load_class_slots, placement_items
from app.services.occupancy import OccupancyTracker
from app.services.week_parity import build_week_parity, get_timetable_weeks_config

logger = logging.getLogger(__name__)


def _lessons_inside(db: Session, blackout: Blackout) -> dict[str, list[ScheduledLesson]]:
    rows = db.execute(
        select(ScheduledLesson, ModuleAssignment.class_id)
        .join(ModuleAssignment, ModuleAssignment.id == ScheduledLesson.assignment_id)
        .where(
            ScheduledLesson.calendar_date >= blackout.start,
            ScheduledLesson.calendar_date <= blackout.end,
        )
        .order_by(ScheduledLesson.calendar_date, ScheduledLesson.order)
    ).all()
    by_class: dict[str, list[ScheduledLesson]] = defaultdict(list)
    for lesson, class_id in rows:
        by_class[class_id].append(lesson)
    return by_class


def reschedule_lessons_for_event(
    db: Session,
    *,
    event_id: str,
    preview: bool = False,
    settings: Settings | None = None,
) -> RescheduleResult:
    """Move every lesson that falls inside a calendar event, cascading later lessons.

    Each class is handled on its own: the lessons inside the event and everything the
    class has scheduled after them are re-seated from the day after the event ends.
    All classes are written in one transaction unless ``preview`` is set.
    """
    settings = settings or get_settings()
    event = db.get(CalendarEvent, event_id)
    if event is None:
        raise ResourceNotFoundError("Calendar event", event_id)

    blackout = Blackout.from_event(event)
    affected_by_class = _lessons_inside(db, blackout)
    if not affected_by_class:
        return RescheduleResult(lessons_rescheduled=0)

    search_start = blackout.end + timedelta(days=1)
    blocked = expand_blocked_dates(load_blackouts(db, ending_on_or_after=search_start))
    week_cycle = get_timetable_weeks_config(db)

    changes: list[ScheduleChange] = []
    updates: list[tuple[ScheduledLesson, ScheduleChange]] = []
    for class_id, affected in affected_by_class.items():
        teaching_class = db.get(TeachingClass, class_id)
        if teaching_class is None or find_year_config(db, teaching_class.academic_year) is None:
            logger.warning("Skipping reschedule for class %s: class or timetable configuration missing", class_id)
            continue

        subsequent = load_class_lessons(db, class_id, after=affected[-1].calendar_date)
        to_reschedule = affected + subsequent
        rescheduled_ids = {lesson.id for lesson in to_reschedule}
        staying = load_class_lessons(db, class_id, on_or_before=affected[0].calendar_date)

        placements = place_sequentially(
            placement_items(to_reschedule),
            load_class_slots(db, class_id),
            start=search_start,
            direction=PlacementDirection.forward,
            blocked_dates=blocked,
            week_cycle=week_cycle,
            parity=build_week_parity(
                db,
                mode=settings.week_parity_mode,
                academic_year=teaching_class.academic_year,
                operation_start=search_start,
            ),
            occupancy=OccupancyTracker.from_lessons(staying, exclude_ids=rescheduled_ids),
            max_days=settings.cascade_search_days,
        )

        for lesson, placement in zip(to_reschedule, placements):
            change = ScheduleChange(
                lesson_id=lesson.id,
                title=lesson.title,
                old_date=lesson.calendar_date,
                new_date=placement.day,
                old_slot_id=lesson.timetable_slot_id,
                new_slot_id=placement.slot_id,
            )
            changes.append(change)
            updates.append((lesson, change))

    if not preview and updates:
        with transaction(db):
            for lesson, change in updates:
                lesson.calendar_date = change.new_date
                lesson.timetable_slot_id = change.new_slot_id
        logger.info(
            "Rescheduled %d lesson(s) across %d class(es) for event %s (%s)",
            len(updates),
            len(affected_by_class),
            event_id,
            blackout.title,
        )

    return RescheduleResult(
        lessons_rescheduled=len(changes),
        rescheduled_lesson_ids=[change.lesson_id for change in changes],
        changes=changes,
    )
