from __future__ import annotations

import logging

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine
from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableConfig

logger = logging.getLogger(__name__)


def _create_missing_tables() -> None:
    with engine.begin() as connection:
        existing = set(inspect(connection).get_table_names())
        missing = [table for name, table in Base.metadata.tables.items() if name not in existing]
        if not missing:
            return
        logger.info("Creating missing tables: %s", ", ".join(sorted(table.name for table in missing)))
        Base.metadata.create_all(bind=connection, tables=missing)


def ensure_global_timetable_config(db: Session) -> TimetableConfig:
    config = db.execute(
        select(TimetableConfig).where(TimetableConfig.academic_year == GLOBAL_CONFIG_KEY)
    ).scalar_one_or_none()
    if config is None:
        config = TimetableConfig(academic_year=GLOBAL_CONFIG_KEY, weeks=1)
        db.add(config)
        db.commit()
        logger.info("Created default GLOBAL timetable configuration (1-week cycle)")
    return config


def ensure_schema() -> None:
    _create_missing_tables()
    with Session(engine) as db:
        ensure_global_timetable_config(db)
