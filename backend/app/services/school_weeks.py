from __future__ import annotations

import logging
from datetime import date, timedelta
from threading import Lock

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.calendar_event import CalendarEvent, CalendarEventType
from app.services.blackouts import Blackout
from app.services.week_parity import WeekLabel, academic_year_start, start_of_week

logger = logging.getLogger(__name__)


class SchoolWeekCache:
    """School week numbers keyed by (academic_year, day).

    Holidays decide which weeks count, so the cache has to be invalidated whenever a
    calendar event is created, changed or removed.
    """

    def __init__(self) -> None:
        self._weeks: dict[tuple[str, date], int] = {}
        self._lock = Lock()

    def get(self, academic_year: str, day: date) -> int | None:
        with self._lock:
            return self._weeks.get((academic_year, day))

    def put(self, academic_year: str, day: date, week_number: int) -> None:
        with self._lock:
            self._weeks[(academic_year, day)] = week_number

    def invalidate(self) -> None:
        with self._lock:
            if self._weeks:
                logger.debug("Clearing %d cached school week(s)", len(self._weeks))
            self._weeks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._weeks)


school_week_cache = SchoolWeekCache()


def get_school_week_cache() -> SchoolWeekCache:
    return school_week_cache


def _holidays_for_year(db: Session, academic_year: str) -> list[Blackout]:
    year_start = academic_year_start(academic_year)
    year_end = date(year_start.year + 1, 8, 31)
    events = db.execute(
        select(CalendarEvent).where(
            CalendarEvent.type == CalendarEventType.holiday,
            CalendarEvent.start_date <= year_end,
            CalendarEvent.end_date >= year_start,
        )
    ).scalars()
    return [Blackout.from_event(event) for event in events]


def _week_fully_covered(week_start: date, holidays: list[Blackout]) -> bool:
    return all(
        any(holiday.covers(week_start + timedelta(days=offset)) for holiday in holidays)
        for offset in range(7)
    )


def school_week_number(db: Session, day: date, academic_year: str, cache: SchoolWeekCache) -> int:
    """Teaching week number of ``day``; weeks entirely inside a holiday are not counted.

    Week 1 starts on the Monday of the week holding September 1. Days before it are
    week 0.
    """
    cached = cache.get(academic_year, day)
    if cached is not None:
        return cached

    first_week = start_of_week(academic_year_start(academic_year))
    if day < first_week:
        cache.put(academic_year, day, 0)
        return 0

    holidays = _holidays_for_year(db, academic_year)
    week_number = 0
    week_start = first_week
    while week_start <= day:
        if not _week_fully_covered(week_start, holidays):
            week_number += 1
        week_start += timedelta(days=7)

    cache.put(academic_year, day, week_number)
    return week_number


def label_for_school_week(week_number: int) -> WeekLabel:
    return "A" if week_number % 2 == 1 else "B"
