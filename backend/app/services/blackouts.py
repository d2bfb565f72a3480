from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.calendar_event import CalendarEvent, CalendarEventType
from app.services.week_parity import to_utc_day


@dataclass(frozen=True)
class Blackout:
    """Full-day blocked range. ``kind`` is kept for display only; every kind blocks the same way."""

    kind: CalendarEventType
    title: str
    start: date
    end: date

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "Blackout":
        return cls(
            kind=event.type,
            title=event.title,
            start=to_utc_day(event.start_date),
            end=to_utc_day(event.end_date),
        )

    def days(self) -> Iterable[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


def load_blackouts(db: Session, *, ending_on_or_after: date | None = None) -> list[Blackout]:
    # affects_all_classes is not filtered on: every event blocks every class.
    query = select(CalendarEvent)
    if ending_on_or_after is not None:
        query = query.where(CalendarEvent.end_date >= ending_on_or_after)
    query = query.order_by(CalendarEvent.start_date)
    return [Blackout.from_event(event) for event in db.execute(query).scalars()]


def expand_blocked_dates(blackouts: Iterable[Blackout]) -> set[date]:
    blocked: set[date] = set()
    for blackout in blackouts:
        blocked.update(blackout.days())
    return blocked
