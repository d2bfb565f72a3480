from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.course import Course
from app.models.module import Lesson, Module
from app.schemas.course import (
    CourseCreate,
    CourseOut,
    CourseUpdate,
    LessonCreate,
    LessonOut,
    LessonReorderRequest,
    LessonUpdate,
    ModuleCreate,
    ModuleOut,
    ModuleUpdate,
)
from app.services.curriculum import (
    delete_course,
    delete_lesson,
    reorder_lessons,
    update_course,
    update_lesson,
    update_module,
)

router = APIRouter()


@router.post("/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOut:
    course = Course(**payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.get("/courses", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)) -> list[CourseOut]:
    return list(db.execute(select(Course).order_by(Course.name)).scalars())


@router.put("/courses/{course_id}", response_model=CourseOut)
def edit_course(course_id: str, payload: CourseUpdate, db: Session = Depends(get_db)) -> CourseOut:
    return update_course(db, course_id, payload)


@router.delete("/courses/{course_id}")
def remove_course(course_id: str, db: Session = Depends(get_db)) -> dict:
    delete_course(db, course_id)
    return {"success": True}


@router.post("/courses/{course_id}/modules", response_model=ModuleOut, status_code=status.HTTP_201_CREATED)
def create_module(course_id: str, payload: ModuleCreate, db: Session = Depends(get_db)) -> ModuleOut:
    if db.get(Course, course_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    module = Module(course_id=course_id, **payload.model_dump())
    db.add(module)
    db.commit()
    db.refresh(module)
    return module


@router.put("/modules/{module_id}", response_model=ModuleOut)
def edit_module(module_id: str, payload: ModuleUpdate, db: Session = Depends(get_db)) -> ModuleOut:
    return update_module(db, module_id, payload)


@router.get("/modules/{module_id}/lessons", response_model=list[LessonOut])
def list_lessons(module_id: str, db: Session = Depends(get_db)) -> list[LessonOut]:
    if db.get(Module, module_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    return list(db.execute(select(Lesson).where(Lesson.module_id == module_id).order_by(Lesson.order)).scalars())


@router.post("/modules/{module_id}/lessons", response_model=LessonOut, status_code=status.HTTP_201_CREATED)
def create_lesson(module_id: str, payload: LessonCreate, db: Session = Depends(get_db)) -> LessonOut:
    if db.get(Module, module_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    data = payload.model_dump()
    if data["order"] is None:
        # Append after the current last lesson.
        last_order = db.execute(select(func.max(Lesson.order)).where(Lesson.module_id == module_id)).scalar()
        data["order"] = 0 if last_order is None else last_order + 1
    lesson = Lesson(module_id=module_id, **data)
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


@router.put("/modules/{module_id}/lessons/order", response_model=list[LessonOut])
def reorder_module_lessons(
    module_id: str,
    payload: LessonReorderRequest,
    db: Session = Depends(get_db),
) -> list[LessonOut]:
    return reorder_lessons(db, module_id, payload.lesson_ids)


@router.put("/lessons/{lesson_id}", response_model=LessonOut)
def edit_lesson(lesson_id: str, payload: LessonUpdate, db: Session = Depends(get_db)) -> LessonOut:
    return update_lesson(db, lesson_id, payload)


@router.delete("/lessons/{lesson_id}")
def remove_lesson(lesson_id: str, db: Session = Depends(get_db)) -> dict:
    delete_lesson(db, lesson_id)
    return {"success": True}
