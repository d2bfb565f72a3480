from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from app.models.calendar_event import CalendarEventType
from app.schemas.common import reject_null


class CalendarEventCreate(BaseModel):
    type: CalendarEventType
    title: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    affects_all_classes: bool = True

    @model_validator(mode="after")
    def validate_range(self) -> "CalendarEventCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CalendarEventUpdate(BaseModel):
    type: CalendarEventType | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    affects_all_classes: bool | None = None

    @field_validator("type", "title", "start_date", "end_date", "affects_all_classes")
    @classmethod
    def check_not_null(cls, value, info: ValidationInfo):
        return reject_null(value, info.field_name)


class CalendarEventOut(CalendarEventCreate):
    id: str

    model_config = {"from_attributes": True}


class SchoolWeekOut(BaseModel):
    academic_year: str
    date: date
    week_number: int
    week_label: str | None = None
