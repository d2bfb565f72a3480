from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Literal, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableConfig

WeekLabel = Literal["A", "B"]
ParityMode = Literal["anchored", "relative"]


def to_utc_day(value: date | datetime) -> date:
    """Collapse a date or datetime onto its UTC calendar day. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    return value


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def iso_weekday(day: date) -> int:
    return day.isoweekday()


def week_number(day: date, reference_start: date) -> int:
    """Week 1 is the seven days starting at ``reference_start``."""
    return (day - reference_start).days // 7 + 1


def week_label(day: date, reference_start: date) -> WeekLabel:
    return "A" if week_number(day, reference_start) % 2 == 1 else "B"


def start_of_week(day: date) -> date:
    return day - timedelta(days=day.isoweekday() - 1)


def academic_year_start(academic_year: str) -> date:
    start_year = int(academic_year.split("-")[0])
    return date(start_year, 9, 1)


class WeekParity(Protocol):
    def label_for(self, day: date) -> WeekLabel: ...


@dataclass(frozen=True)
class AnchoredWeekParity:
    """A/B labels counted from one persisted week-zero date."""

    anchor: date

    def label_for(self, day: date) -> WeekLabel:
        return week_label(day, self.anchor)


@dataclass(frozen=True)
class RelativeWeekParity:
    """A/B labels counted from whatever date the running operation starts at."""

    reference_start: date

    def label_for(self, day: date) -> WeekLabel:
        return week_label(day, self.reference_start)


def resolve_week_anchor(db: Session, academic_year: str) -> date:
    rows = db.execute(
        select(TimetableConfig).where(TimetableConfig.academic_year.in_([academic_year, GLOBAL_CONFIG_KEY]))
    ).scalars()
    by_year = {row.academic_year: row for row in rows}
    for key in (academic_year, GLOBAL_CONFIG_KEY):
        config = by_year.get(key)
        if config is not None and config.week_zero_date is not None:
            return config.week_zero_date
    return start_of_week(academic_year_start(academic_year))


def build_week_parity(
    db: Session,
    *,
    mode: ParityMode,
    academic_year: str,
    operation_start: date,
) -> WeekParity:
    if mode == "relative":
        return RelativeWeekParity(reference_start=operation_start)
    return AnchoredWeekParity(anchor=resolve_week_anchor(db, academic_year))


def get_timetable_weeks_config(db: Session) -> int:
    """School-wide timetable cycle length (1 or 2) from the GLOBAL config row."""
    config = db.execute(
        select(TimetableConfig).where(TimetableConfig.academic_year == GLOBAL_CONFIG_KEY).limit(1)
    ).scalar_one_or_none()
    if config is None or config.weeks not in (1, 2):
        return 1
    return config.weeks
