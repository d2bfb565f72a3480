from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, SchedulingValidationError
from app.db.session import transaction
from app.models.assignment import ScheduledLesson
from app.models.teaching_class import TeachingClass
from app.models.timetable import TimetableSlot
from app.schemas.classes import TeachingClassUpdate
from app.schemas.timetable import TimetableSlotUpdate
from app.services.lesson_queries import get_teaching_class

logger = logging.getLogger(__name__)


def update_class(db: Session, class_id: str, payload: TeachingClassUpdate) -> TeachingClass:
    teaching_class = get_teaching_class(db, class_id)
    with transaction(db):
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(teaching_class, key, value)
    db.refresh(teaching_class)
    return teaching_class


def get_class_slot(db: Session, class_id: str, slot_id: str) -> TimetableSlot:
    get_teaching_class(db, class_id)
    slot = db.get(TimetableSlot, slot_id)
    if slot is None or slot.class_id != class_id:
        raise ResourceNotFoundError("Timetable slot", slot_id)
    return slot


def update_slot(db: Session, class_id: str, slot_id: str, payload: TimetableSlotUpdate) -> TimetableSlot:
    slot = get_class_slot(db, class_id, slot_id)
    data = payload.model_dump(exclude_unset=True)
    period_start = data.get("period_start", slot.period_start)
    period_end = data.get("period_end", slot.period_end)
    if period_end < period_start:
        raise SchedulingValidationError("period_end must not be before period_start")

    with transaction(db):
        for key, value in data.items():
            setattr(slot, key, value)
    db.refresh(slot)
    return slot


def delete_slot(db: Session, class_id: str, slot_id: str) -> None:
    """Remove a slot; lessons seated in it keep their date but lose the slot link."""
    slot = get_class_slot(db, class_id, slot_id)
    with transaction(db):
        result = db.execute(
            update(ScheduledLesson)
            .where(ScheduledLesson.timetable_slot_id == slot_id)
            .values(timetable_slot_id=None)
        )
        db.delete(slot)
    logger.info("Deleted slot %s of class %s, detached %d lessons", slot_id, class_id, result.rowcount)
