from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import reject_null
from app.schemas.timetable import validate_academic_year


def _specific_academic_year(value: str) -> str:
    academic_year = validate_academic_year(value)
    if academic_year == "GLOBAL":
        raise ValueError("Classes must belong to a specific academic year")
    return academic_year


class TeachingClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    year_group: int = Field(ge=7, le=13)
    academic_year: str
    course_id: str | None = Field(default=None, max_length=36)
    student_count: int | None = Field(default=None, ge=1, le=500)
    room: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return _specific_academic_year(value)


class TeachingClassUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    year_group: int | None = Field(default=None, ge=7, le=13)
    academic_year: str | None = None
    course_id: str | None = Field(default=None, max_length=36)
    student_count: int | None = Field(default=None, ge=1, le=500)
    room: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)

    @field_validator("name", "year_group", "academic_year")
    @classmethod
    def check_required(cls, value, info: ValidationInfo):
        value = reject_null(value, info.field_name)
        if info.field_name == "academic_year":
            return _specific_academic_year(value)
        return value


class TeachingClassOut(TeachingClassCreate):
    id: str

    model_config = {"from_attributes": True}


class ScheduledLessonOut(BaseModel):
    id: str
    assignment_id: str
    lesson_id: str
    calendar_date: date
    timetable_slot_id: str | None = None
    title: str
    content: str | None = None
    duration: int
    order: int

    model_config = {"from_attributes": True}
