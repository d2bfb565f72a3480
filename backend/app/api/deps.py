from collections.abc import Generator

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.services.school_weeks import SchoolWeekCache, get_school_week_cache


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_week_cache() -> SchoolWeekCache:
    return get_school_week_cache()
