from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

PushDirection = Literal["forward", "back"]


class AssignModuleRequest(BaseModel):
    module_id: str = Field(min_length=1, max_length=36)
    start_date: date | None = None


class AssignModuleOut(BaseModel):
    assignment_id: str


class NextSlotOut(BaseModel):
    class_id: str
    date: date


class PushLessonRequest(BaseModel):
    direction: PushDirection
    preview: bool = False


class RescheduleRequest(BaseModel):
    preview: bool = False


class ScheduleChange(BaseModel):
    lesson_id: str
    title: str
    old_date: date
    new_date: date
    old_slot_id: str | None = None
    new_slot_id: str


class PushResult(BaseModel):
    lessons_affected: int
    affected_lesson_ids: list[str] = Field(default_factory=list)
    changes: list[ScheduleChange] = Field(default_factory=list)


class RescheduleResult(BaseModel):
    lessons_rescheduled: int
    rescheduled_lesson_ids: list[str] = Field(default_factory=list)
    changes: list[ScheduleChange] = Field(default_factory=list)
