from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.timetable import TimetableConfig
from app.schemas.timetable import TimetableConfigOut, TimetableConfigUpdate, validate_academic_year
from app.services.lesson_queries import find_year_config

router = APIRouter()


def _checked_year(academic_year: str) -> str:
    try:
        return validate_academic_year(academic_year)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.get("/config/{academic_year}", response_model=TimetableConfigOut)
def get_timetable_config(academic_year: str, db: Session = Depends(get_db)) -> TimetableConfigOut:
    config = find_year_config(db, _checked_year(academic_year))
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable configuration not found")
    return config


@router.put("/config/{academic_year}", response_model=TimetableConfigOut)
def upsert_timetable_config(
    academic_year: str,
    payload: TimetableConfigUpdate,
    db: Session = Depends(get_db),
) -> TimetableConfigOut:
    academic_year = _checked_year(academic_year)
    config = find_year_config(db, academic_year)
    if config is None:
        config = TimetableConfig(academic_year=academic_year)
        db.add(config)
    for key, value in payload.model_dump().items():
        setattr(config, key, value)
    db.commit()
    db.refresh(config)
    return config
