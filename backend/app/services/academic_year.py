from __future__ import annotations

from datetime import date

from app.services.week_parity import utc_today


def academic_year_for(day: date) -> str:
    """Academic year label ("YYYY-YY") for a day; years start on September 1."""
    start_year = day.year if day.month >= 9 else day.year - 1
    return f"{start_year}-{str(start_year + 1)[-2:]}"


def current_academic_year() -> str:
    return academic_year_for(utc_today())
