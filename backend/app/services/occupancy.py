from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from app.models.assignment import ScheduledLesson
from app.services.week_parity import to_utc_day


class OccupancyTracker:
    """Set of ``(day, slot_id)`` pairs already taken for one class."""

    def __init__(self, pairs: Iterable[tuple[date, str]] = ()) -> None:
        self._taken: set[tuple[date, str]] = set(pairs)

    @classmethod
    def from_lessons(
        cls,
        lessons: Iterable[ScheduledLesson],
        *,
        exclude_ids: set[str] | None = None,
    ) -> "OccupancyTracker":
        excluded = exclude_ids or set()
        return cls(
            (to_utc_day(lesson.calendar_date), lesson.timetable_slot_id)
            for lesson in lessons
            if lesson.timetable_slot_id is not None and lesson.id not in excluded
        )

    def is_occupied(self, day: date, slot_id: str) -> bool:
        return (day, slot_id) in self._taken

    def claim(self, day: date, slot_id: str) -> None:
        self._taken.add((day, slot_id))

    def occupied_days(self) -> set[date]:
        return {day for day, _ in self._taken}

    def __len__(self) -> int:
        return len(self._taken)

    def __contains__(self, pair: object) -> bool:
        return pair in self._taken
