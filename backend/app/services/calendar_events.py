from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, SchedulingValidationError
from app.db.session import transaction
from app.models.calendar_event import CalendarEvent, CalendarEventType
from app.schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from app.services.school_weeks import SchoolWeekCache

logger = logging.getLogger(__name__)


def list_calendar_events(db: Session, *, start: date | None = None, end: date | None = None) -> list[CalendarEvent]:
    query = select(CalendarEvent)
    if start is not None:
        query = query.where(CalendarEvent.end_date >= start)
    if end is not None:
        query = query.where(CalendarEvent.start_date <= end)
    return list(db.execute(query.order_by(CalendarEvent.start_date)).scalars())


def create_calendar_event(db: Session, payload: CalendarEventCreate, *, cache: SchoolWeekCache) -> CalendarEvent:
    with transaction(db):
        event = CalendarEvent(**payload.model_dump())
        db.add(event)
    cache.invalidate()
    db.refresh(event)
    logger.info("Created %s event %r (%s to %s)", event.type.value, event.title, event.start_date, event.end_date)
    return event


def update_calendar_event(
    db: Session,
    event_id: str,
    payload: CalendarEventUpdate,
    *,
    cache: SchoolWeekCache,
) -> CalendarEvent:
    event = db.get(CalendarEvent, event_id)
    if event is None:
        raise ResourceNotFoundError("Calendar event", event_id)

    data = payload.model_dump(exclude_unset=True)
    start_date = data.get("start_date", event.start_date)
    end_date = data.get("end_date", event.end_date)
    if end_date < start_date:
        raise SchedulingValidationError("end_date must not be before start_date")

    with transaction(db):
        for key, value in data.items():
            setattr(event, key, value)
    cache.invalidate()
    db.refresh(event)
    return event


def delete_calendar_event(db: Session, event_id: str, *, cache: SchoolWeekCache) -> None:
    event = db.get(CalendarEvent, event_id)
    if event is None:
        raise ResourceNotFoundError("Calendar event", event_id)
    with transaction(db):
        db.delete(event)
    cache.invalidate()


def _default_term_breaks(academic_year: str) -> list[tuple[str, date, date]]:
    start_year = int(academic_year.split("-")[0])
    end_year = start_year + 1
    return [
        ("Autumn Half Term", date(start_year, 10, 24), date(start_year, 10, 28)),
        ("Christmas Holiday", date(start_year, 12, 20), date(end_year, 1, 3)),
        ("Spring Half Term", date(end_year, 2, 14), date(end_year, 2, 18)),
        ("Easter Holiday", date(end_year, 4, 3), date(end_year, 4, 17)),
        ("Summer Half Term", date(end_year, 5, 28), date(end_year, 6, 1)),
        ("Summer Holiday", date(end_year, 7, 21), date(end_year, 8, 31)),
        # Bank holidays are approximate and move from year to year.
        ("May Day Bank Holiday", date(end_year, 5, 1), date(end_year, 5, 1)),
        ("Spring Bank Holiday", date(end_year, 5, 29), date(end_year, 5, 29)),
    ]


def seed_term_dates(db: Session, academic_year: str, *, cache: SchoolWeekCache) -> list[CalendarEvent]:
    """Create the usual UK school holidays for a year, skipping any that already exist.

    An existing event with the same title and start date counts as already seeded.
    """
    seeded: list[CalendarEvent] = []
    with transaction(db):
        for title, start_date, end_date in _default_term_breaks(academic_year):
            existing = db.execute(
                select(CalendarEvent).where(
                    CalendarEvent.title == title,
                    CalendarEvent.start_date == start_date,
                )
            ).scalars().first()
            if existing is not None:
                seeded.append(existing)
                continue
            event = CalendarEvent(
                type=CalendarEventType.holiday,
                title=title,
                start_date=start_date,
                end_date=end_date,
                affects_all_classes=True,
            )
            db.add(event)
            seeded.append(event)
    cache.invalidate()
    return seeded
