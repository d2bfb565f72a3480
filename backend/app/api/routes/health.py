from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, select, text

from app.db.session import engine
from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableConfig

router = APIRouter()

REQUIRED_TABLES = (
    "classes",
    "timetable_config",
    "timetable_slots",
    "calendar_events",
    "modules",
    "lessons",
    "module_assignments",
    "scheduled_lessons",
)


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    db_error: str | None = None
    week_cycle: int | None = None

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            table_names = set(inspect(connection).get_table_names())
            missing_tables = [name for name in REQUIRED_TABLES if name not in table_names]
            if "timetable_config" in table_names:
                week_cycle = connection.execute(
                    select(TimetableConfig.weeks).where(TimetableConfig.academic_year == GLOBAL_CONFIG_KEY)
                ).scalar_one_or_none()
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    ready = db_ok and not missing_tables
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": not missing_tables,
            "missing_tables": missing_tables,
            "error": db_error,
        },
        # A missing GLOBAL row is not fatal: a one-week cycle is assumed.
        "timetable": {
            "global_config": week_cycle is not None,
            "week_cycle": week_cycle or 1,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
