from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.scheduling import PushLessonRequest, PushResult
from app.services.push import push_lesson

router = APIRouter()


@router.post("/{lesson_id}/push", response_model=PushResult)
def push_scheduled_lesson(lesson_id: str, payload: PushLessonRequest, db: Session = Depends(get_db)) -> PushResult:
    return push_lesson(db, lesson_id=lesson_id, direction=payload.direction, preview=payload.preview)
