from __future__ import annotations

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import reject_null


class CourseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    notes: str | None = Field(default=None, max_length=10000)


class CourseOut(CourseCreate):
    id: str

    model_config = {"from_attributes": True}


class CourseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    notes: str | None = Field(default=None, max_length=10000)

    @field_validator("name")
    @classmethod
    def check_not_null(cls, value, info: ValidationInfo):
        return reject_null(value, info.field_name)


class ModuleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    notes: str | None = Field(default=None, max_length=10000)


class ModuleOut(ModuleCreate):
    id: str
    course_id: str

    model_config = {"from_attributes": True}


class ModuleUpdate(CourseUpdate):
    pass


class LessonCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str | None = None
    duration: int = Field(default=1, ge=1, le=10)
    order: int | None = Field(default=None, ge=0)


class LessonOut(BaseModel):
    id: str
    module_id: str
    title: str
    content: str | None = None
    duration: int
    order: int

    model_config = {"from_attributes": True}


class LessonUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = None
    duration: int | None = Field(default=None, ge=1, le=10)

    @field_validator("title", "duration")
    @classmethod
    def check_not_null(cls, value, info: ValidationInfo):
        return reject_null(value, info.field_name)


class LessonReorderRequest(BaseModel):
    lesson_ids: list[str]
