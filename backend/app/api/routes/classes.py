from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.teaching_class import TeachingClass
from app.models.timetable import TimetableSlot
from app.schemas.classes import ScheduledLessonOut, TeachingClassCreate, TeachingClassOut, TeachingClassUpdate
from app.schemas.scheduling import AssignModuleOut, AssignModuleRequest, NextSlotOut
from app.schemas.timetable import TimetableSlotCreate, TimetableSlotOut, TimetableSlotUpdate
from app.services.assignment import assign_module_to_class, find_next_available_slot
from app.services.classes import delete_slot, update_class, update_slot
from app.services.lesson_queries import load_class_lessons

router = APIRouter()


def _get_class_or_404(db: Session, class_id: str) -> TeachingClass:
    teaching_class = db.get(TeachingClass, class_id)
    if teaching_class is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return teaching_class


@router.get("/", response_model=list[TeachingClassOut])
def list_classes(
    academic_year: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TeachingClassOut]:
    query = select(TeachingClass).order_by(TeachingClass.year_group, TeachingClass.name)
    if academic_year is not None:
        query = query.where(TeachingClass.academic_year == academic_year)
    return list(db.execute(query).scalars())


@router.post("/", response_model=TeachingClassOut, status_code=status.HTTP_201_CREATED)
def create_class(payload: TeachingClassCreate, db: Session = Depends(get_db)) -> TeachingClassOut:
    teaching_class = TeachingClass(**payload.model_dump())
    db.add(teaching_class)
    db.commit()
    db.refresh(teaching_class)
    return teaching_class


@router.get("/{class_id}", response_model=TeachingClassOut)
def get_class(class_id: str, db: Session = Depends(get_db)) -> TeachingClassOut:
    return _get_class_or_404(db, class_id)


@router.put("/{class_id}", response_model=TeachingClassOut)
def edit_class(class_id: str, payload: TeachingClassUpdate, db: Session = Depends(get_db)) -> TeachingClassOut:
    return update_class(db, class_id, payload)


@router.get("/{class_id}/slots", response_model=list[TimetableSlotOut])
def list_slots(class_id: str, db: Session = Depends(get_db)) -> list[TimetableSlotOut]:
    _get_class_or_404(db, class_id)
    return list(
        db.execute(
            select(TimetableSlot)
            .where(TimetableSlot.class_id == class_id)
            .order_by(TimetableSlot.day, TimetableSlot.period_start)
        ).scalars()
    )


@router.post("/{class_id}/slots", response_model=TimetableSlotOut, status_code=status.HTTP_201_CREATED)
def create_slot(class_id: str, payload: TimetableSlotCreate, db: Session = Depends(get_db)) -> TimetableSlotOut:
    _get_class_or_404(db, class_id)
    slot = TimetableSlot(class_id=class_id, **payload.model_dump())
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


@router.put("/{class_id}/slots/{slot_id}", response_model=TimetableSlotOut)
def edit_slot(
    class_id: str,
    slot_id: str,
    payload: TimetableSlotUpdate,
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    return update_slot(db, class_id, slot_id, payload)


@router.delete("/{class_id}/slots/{slot_id}")
def remove_slot(class_id: str, slot_id: str, db: Session = Depends(get_db)) -> dict:
    delete_slot(db, class_id, slot_id)
    return {"success": True}


@router.get("/{class_id}/lessons", response_model=list[ScheduledLessonOut])
def list_scheduled_lessons(
    class_id: str,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ScheduledLessonOut]:
    _get_class_or_404(db, class_id)
    return load_class_lessons(db, class_id, on_or_after=start, on_or_before=end)


@router.post("/{class_id}/assign", response_model=AssignModuleOut, status_code=status.HTTP_201_CREATED)
def assign_module(class_id: str, payload: AssignModuleRequest, db: Session = Depends(get_db)) -> AssignModuleOut:
    assignment_id = assign_module_to_class(
        db,
        class_id=class_id,
        module_id=payload.module_id,
        start_date=payload.start_date,
    )
    return AssignModuleOut(assignment_id=assignment_id)


@router.get("/{class_id}/next-slot", response_model=NextSlotOut)
def next_available_slot(
    class_id: str,
    from_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> NextSlotOut:
    return NextSlotOut(class_id=class_id, date=find_next_available_slot(db, class_id, from_date))
