from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_week_cache
from app.models.timetable import GLOBAL_CONFIG_KEY
from app.schemas.calendar import CalendarEventCreate, CalendarEventOut, CalendarEventUpdate, SchoolWeekOut
from app.schemas.scheduling import RescheduleRequest, RescheduleResult
from app.schemas.timetable import validate_academic_year
from app.services.academic_year import academic_year_for
from app.services.calendar_events import (
    create_calendar_event,
    delete_calendar_event,
    list_calendar_events,
    seed_term_dates,
    update_calendar_event,
)
from app.services.reschedule import reschedule_lessons_for_event
from app.services.school_weeks import SchoolWeekCache, label_for_school_week, school_week_number
from app.services.week_parity import get_timetable_weeks_config

router = APIRouter()


@router.get("/events", response_model=list[CalendarEventOut])
def list_events(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[CalendarEventOut]:
    return list_calendar_events(db, start=start, end=end)


@router.post("/events", response_model=CalendarEventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: CalendarEventCreate,
    db: Session = Depends(get_db),
    cache: SchoolWeekCache = Depends(get_week_cache),
) -> CalendarEventOut:
    return create_calendar_event(db, payload, cache=cache)


@router.put("/events/{event_id}", response_model=CalendarEventOut)
def update_event(
    event_id: str,
    payload: CalendarEventUpdate,
    db: Session = Depends(get_db),
    cache: SchoolWeekCache = Depends(get_week_cache),
) -> CalendarEventOut:
    return update_calendar_event(db, event_id, payload, cache=cache)


@router.delete("/events/{event_id}")
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    cache: SchoolWeekCache = Depends(get_week_cache),
) -> dict:
    delete_calendar_event(db, event_id, cache=cache)
    return {"success": True}


@router.post("/events/{event_id}/reschedule", response_model=RescheduleResult)
def reschedule_for_event(
    event_id: str,
    payload: RescheduleRequest,
    db: Session = Depends(get_db),
) -> RescheduleResult:
    return reschedule_lessons_for_event(db, event_id=event_id, preview=payload.preview)


def _specific_academic_year(value: str) -> str:
    try:
        academic_year = validate_academic_year(value)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    if academic_year == GLOBAL_CONFIG_KEY:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="A specific academic year is required")
    return academic_year


@router.post("/term-dates/{academic_year}", response_model=list[CalendarEventOut])
def seed_default_term_dates(
    academic_year: str,
    db: Session = Depends(get_db),
    cache: SchoolWeekCache = Depends(get_week_cache),
) -> list[CalendarEventOut]:
    academic_year = _specific_academic_year(academic_year)
    return seed_term_dates(db, academic_year, cache=cache)


@router.get("/school-week", response_model=SchoolWeekOut)
def get_school_week(
    on: date = Query(alias="date"),
    academic_year: str | None = Query(default=None),
    db: Session = Depends(get_db),
    cache: SchoolWeekCache = Depends(get_week_cache),
) -> SchoolWeekOut:
    academic_year = _specific_academic_year(academic_year) if academic_year else academic_year_for(on)
    week_number = school_week_number(db, on, academic_year, cache)
    label = None
    if get_timetable_weeks_config(db) == 2 and week_number > 0:
        label = label_for_school_week(week_number)
    return SchoolWeekOut(academic_year=academic_year, date=on, week_number=week_number, week_label=label)
