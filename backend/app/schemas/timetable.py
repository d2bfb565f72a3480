from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableWeek
from app.schemas.common import reject_null

ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def validate_academic_year(value: str) -> str:
    candidate = value.strip()
    if candidate == GLOBAL_CONFIG_KEY:
        return candidate
    if not ACADEMIC_YEAR_PATTERN.match(candidate):
        raise ValueError("Academic year must be in YYYY-YY format")
    start_year, end_suffix = candidate.split("-")
    if (int(start_year) + 1) % 100 != int(end_suffix):
        raise ValueError("Academic year must span consecutive years")
    return candidate


class TimetableConfigUpdate(BaseModel):
    weeks: int = Field(default=1, ge=1, le=2)
    periods_per_day: int = Field(default=6, ge=1, le=10)
    days_per_week: int = Field(default=5, ge=1, le=7)
    week_zero_date: date | None = None


class TimetableConfigOut(TimetableConfigUpdate):
    id: str
    academic_year: str

    model_config = {"from_attributes": True}


class TimetableSlotCreate(BaseModel):
    day: int = Field(ge=1, le=7)
    period_start: int = Field(ge=1, le=20)
    period_end: int = Field(ge=1, le=20)
    week: TimetableWeek | None = None

    @model_validator(mode="after")
    def validate_period_range(self) -> "TimetableSlotCreate":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class TimetableSlotUpdate(BaseModel):
    day: int | None = Field(default=None, ge=1, le=7)
    period_start: int | None = Field(default=None, ge=1, le=20)
    period_end: int | None = Field(default=None, ge=1, le=20)
    week: TimetableWeek | None = None

    @field_validator("day", "period_start", "period_end")
    @classmethod
    def check_not_null(cls, value, info: ValidationInfo):
        return reject_null(value, info.field_name)


class TimetableSlotOut(TimetableSlotCreate):
    id: str
    class_id: str
    duration: int

    model_config = {"from_attributes": True}

