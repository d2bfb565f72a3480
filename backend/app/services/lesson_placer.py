from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from app.core.exceptions import UnsatisfiablePlacementError
from app.models.timetable import TimetableSlot
from app.services.occupancy import OccupancyTracker
from app.services.week_parity import WeekLabel, WeekParity, iso_weekday

logger = logging.getLogger(__name__)


class PlacementDirection(str, Enum):
    forward = "forward"
    backward = "backward"


@dataclass(frozen=True)
class SlotInfo:
    id: str
    day: int
    period_start: int
    period_end: int
    week: WeekLabel | None = None

    @property
    def duration(self) -> int:
        return self.period_end - self.period_start + 1

    @classmethod
    def from_model(cls, slot: TimetableSlot) -> "SlotInfo":
        week = slot.week.value if slot.week is not None else None
        return cls(
            id=slot.id,
            day=slot.day,
            period_start=slot.period_start,
            period_end=slot.period_end,
            week=week,
        )


@dataclass(frozen=True)
class PlacementItem:
    id: str
    title: str
    duration: int


@dataclass(frozen=True)
class Placement:
    item_id: str
    day: date
    slot_id: str


def order_slots(slots: Sequence[SlotInfo], direction: PlacementDirection) -> list[SlotInfo]:
    """Tie-break order: ascending (day, period_start) forward, descending backward."""
    ordered = sorted(slots, key=lambda slot: (slot.day, slot.period_start))
    if direction == PlacementDirection.backward:
        ordered.reverse()
    return ordered


def _first_open_slot(
    day: date,
    item: PlacementItem,
    slots: Sequence[SlotInfo],
    *,
    week_cycle: int,
    parity: WeekParity,
    occupancy: OccupancyTracker,
) -> SlotInfo | None:
    weekday = iso_weekday(day)
    label: WeekLabel | None = None
    for slot in slots:
        if slot.day != weekday:
            continue
        if week_cycle == 2 and slot.week is not None:
            if label is None:
                label = parity.label_for(day)
            if slot.week != label:
                continue
        if slot.duration != item.duration:
            continue
        if occupancy.is_occupied(day, slot.id):
            continue
        return slot
    return None


def _unplaceable(item: PlacementItem, direction: PlacementDirection) -> UnsatisfiablePlacementError:
    suffix = " when pushing backward" if direction == PlacementDirection.backward else ""
    return UnsatisfiablePlacementError(
        f'Could not find a suitable slot for lesson "{item.title}"{suffix}. '
        f"The lesson requires {item.duration} period(s), but no matching slot is available.",
        item_id=item.id,
        title=item.title,
        duration=item.duration,
        direction=direction.value,
    )


def place_sequentially(
    items: Sequence[PlacementItem],
    slots: Sequence[SlotInfo],
    *,
    start: date,
    direction: PlacementDirection = PlacementDirection.forward,
    blocked_dates: set[date] | frozenset[date] = frozenset(),
    week_cycle: int = 1,
    parity: WeekParity,
    occupancy: OccupancyTracker,
    max_days: int = 365,
) -> list[Placement]:
    """Greedily seat each item in the first free matching slot, walking day by day.

    Items keep their relative order: forward placement never moves the cursor
    backwards, so several items may share a day through different slots. Backward
    placement seats the last item first and walks towards the past. ``occupancy``
    is updated in place as slots are claimed.

    Raises ``UnsatisfiablePlacementError`` for the first item still unseated once
    ``max_days`` days have been scanned.
    """
    step = timedelta(days=1 if direction == PlacementDirection.forward else -1)
    ordered = order_slots(slots, direction)
    indices = range(len(items)) if direction == PlacementDirection.forward else range(len(items) - 1, -1, -1)

    seated: dict[int, Placement] = {}
    cursor = start
    days_searched = 0
    for index in indices:
        item = items[index]
        while True:
            if days_searched >= max_days:
                raise _unplaceable(item, direction)
            if cursor in blocked_dates:
                cursor += step
                days_searched += 1
                continue
            slot = _first_open_slot(
                cursor,
                item,
                ordered,
                week_cycle=week_cycle,
                parity=parity,
                occupancy=occupancy,
            )
            if slot is not None:
                occupancy.claim(cursor, slot.id)
                seated[index] = Placement(item_id=item.id, day=cursor, slot_id=slot.id)
                break
            cursor += step
            days_searched += 1

    logger.debug(
        "Placed %d item(s) %s from %s after scanning %d day(s)",
        len(items),
        direction.value,
        start.isoformat(),
        days_searched,
    )
    return [seated[index] for index in range(len(items))]
