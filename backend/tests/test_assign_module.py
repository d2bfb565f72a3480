from datetime import date

import pytest
from sqlalchemy import func, select

from app.core.config import get_settings
from app.core.exceptions import (
    ResourceNotFoundError,
    SchedulerError,
    SchedulingValidationError,
    UnsatisfiablePlacementError,
)
from app.models.assignment import ModuleAssignment, ScheduledLesson
from app.services import assignment as assignment_service
from app.services.assignment import assign_module_to_class, find_next_available_slot

MONDAY = date(2024, 9, 2)


def lesson_dates(planner, class_id):
    return [lesson.calendar_date for lesson in planner.lessons_for_class(class_id)]


def test_assigns_lessons_to_consecutive_weekdays(db, planner, weekday_class):
    module = planner.single_lessons(5)

    assignment_id = assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)

    lessons = planner.lessons_for_class(weekday_class.id)
    assert [lesson.calendar_date for lesson in lessons] == [
        date(2024, 9, 2),
        date(2024, 9, 3),
        date(2024, 9, 4),
        date(2024, 9, 5),
        date(2024, 9, 6),
    ]
    assert [lesson.title for lesson in lessons] == [f"Lesson {index}" for index in range(1, 6)]
    assert {lesson.assignment_id for lesson in lessons} == {assignment_id}
    assert lessons[2].timetable_slot_id == planner.slot_id(weekday_class.id, 3)
    assert lessons[0].content == "Notes for Lesson 1"
    assert [lesson.order for lesson in lessons] == [0, 1, 2, 3, 4]

    assignment = db.get(ModuleAssignment, assignment_id)
    assert assignment.start_date == MONDAY
    assert assignment.module_id == module.id


def test_places_lessons_only_on_timetabled_days(db, planner):
    teaching_class = planner.teaching_class([(1, 1, 1), (3, 1, 1)])
    module = planner.single_lessons(2)

    assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)

    assert lesson_dates(planner, teaching_class.id) == [date(2024, 9, 2), date(2024, 9, 4)]


def test_two_week_timetable_uses_week_labels(db, planner):
    planner.week_cycle(2)
    planner.year_config("2024-25", week_zero_date=MONDAY)
    teaching_class = planner.teaching_class([(1, 1, 1, "A"), (3, 1, 1, "B")])
    module = planner.single_lessons(2)

    assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)

    assert lesson_dates(planner, teaching_class.id) == [date(2024, 9, 2), date(2024, 9, 11)]


def test_week_labels_are_ignored_on_a_one_week_timetable(db, planner):
    planner.year_config("2024-25", week_zero_date=MONDAY)
    teaching_class = planner.teaching_class([(1, 1, 1, "A"), (3, 1, 1, "B")])
    module = planner.single_lessons(2)

    assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)

    assert lesson_dates(planner, teaching_class.id) == [date(2024, 9, 2), date(2024, 9, 4)]


def test_skips_calendar_events(db, planner, weekday_class):
    planner.event(date(2024, 9, 3), title="INSET day")
    module = planner.single_lessons(3)

    assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)

    assert lesson_dates(planner, weekday_class.id) == [date(2024, 9, 2), date(2024, 9, 4), date(2024, 9, 5)]


def test_respects_lessons_already_scheduled(db, planner, weekday_class):
    first = planner.single_lessons(2, prefix="Energy")
    second = planner.single_lessons(2, prefix="Waves")

    assign_module_to_class(db, class_id=weekday_class.id, module_id=first.id, start_date=MONDAY)
    assign_module_to_class(db, class_id=weekday_class.id, module_id=second.id, start_date=MONDAY)

    lessons = planner.lessons_for_class(weekday_class.id)
    assert [(lesson.title, lesson.calendar_date) for lesson in lessons] == [
        ("Energy 1", date(2024, 9, 2)),
        ("Energy 2", date(2024, 9, 3)),
        ("Waves 1", date(2024, 9, 4)),
        ("Waves 2", date(2024, 9, 5)),
    ]


def test_double_lessons_need_double_slots(db, planner):
    teaching_class = planner.teaching_class([(1, 1, 1), (2, 3, 4)])
    module = planner.module([("Practical", 2), ("Write-up", 1)])

    assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)

    lessons = planner.lessons_for_class(teaching_class.id)
    assert [(lesson.title, lesson.calendar_date, lesson.duration) for lesson in lessons] == [
        ("Practical", date(2024, 9, 3), 2),
        ("Write-up", date(2024, 9, 9), 1),
    ]


def test_unplaceable_lesson_writes_nothing(db, planner, weekday_class):
    module = planner.module([("Intro", 1), ("Required practical", 2)])

    with pytest.raises(UnsatisfiablePlacementError) as exc_info:
        assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)

    assert 'lesson "Required practical"' in exc_info.value.message
    assert db.execute(select(func.count()).select_from(ModuleAssignment)).scalar() == 0
    assert db.execute(select(func.count()).select_from(ScheduledLesson)).scalar() == 0


def test_missing_class(db, planner):
    module = planner.single_lessons(1)
    with pytest.raises(ResourceNotFoundError) as exc_info:
        assign_module_to_class(db, class_id="missing", module_id=module.id, start_date=MONDAY)
    assert exc_info.value.message == "Class not found"


def test_missing_module(db, weekday_class):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        assign_module_to_class(db, class_id=weekday_class.id, module_id="missing", start_date=MONDAY)
    assert exc_info.value.message == "Module not found"


def test_missing_year_configuration(db, planner):
    teaching_class = planner.teaching_class([(1, 1, 1)], with_config=False)
    module = planner.single_lessons(1)
    with pytest.raises(SchedulingValidationError) as exc_info:
        assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)
    assert exc_info.value.message == "Timetable configuration not found for academic year"


def test_class_without_slots(db, planner):
    teaching_class = planner.teaching_class()
    module = planner.single_lessons(1)
    with pytest.raises(SchedulingValidationError) as exc_info:
        assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)
    assert exc_info.value.message == "Class has no timetable slots configured"


def test_module_without_lessons(db, planner, weekday_class):
    module = planner.module()
    with pytest.raises(SchedulingValidationError) as exc_info:
        assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)
    assert exc_info.value.message == "Module has no lessons to schedule"


def test_start_defaults_to_next_available_day(db, planner, weekday_class, monkeypatch):
    monkeypatch.setattr(assignment_service, "utc_today", lambda: date(2024, 9, 7))
    module = planner.single_lessons(2)

    assignment_id = assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id)

    assert db.get(ModuleAssignment, assignment_id).start_date == date(2024, 9, 9)
    assert lesson_dates(planner, weekday_class.id) == [date(2024, 9, 9), date(2024, 9, 10)]


def test_next_available_slot_skips_weekend(db, weekday_class):
    assert find_next_available_slot(db, weekday_class.id, date(2024, 9, 7)) == date(2024, 9, 9)


def test_next_available_slot_skips_days_with_lessons(db, planner, weekday_class):
    module = planner.single_lessons(2)
    assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)

    assert find_next_available_slot(db, weekday_class.id, MONDAY) == date(2024, 9, 4)


def test_next_available_slot_skips_events(db, planner, weekday_class):
    planner.event(date(2024, 9, 2), date(2024, 9, 3))

    assert find_next_available_slot(db, weekday_class.id, MONDAY) == date(2024, 9, 4)


def test_next_available_slot_respects_week_labels(db, planner):
    planner.week_cycle(2)
    planner.year_config("2024-25", week_zero_date=MONDAY)
    teaching_class = planner.teaching_class([(1, 1, 1, "B")])

    assert find_next_available_slot(db, teaching_class.id, MONDAY) == date(2024, 9, 9)


def test_next_available_slot_gives_up_after_budget(db, planner):
    teaching_class = planner.teaching_class([(5, 1, 1)])
    settings = get_settings().model_copy(update={"assignment_search_days": 3})

    with pytest.raises(SchedulerError) as exc_info:
        find_next_available_slot(db, teaching_class.id, MONDAY, settings=settings)

    assert exc_info.value.message == "Could not find an available slot within the next year"


def test_failure_while_writing_lessons_rolls_back_the_assignment(db, planner, weekday_class, monkeypatch):
    module = planner.single_lessons(3)
    created = []

    def failing_scheduled_lesson(**fields):
        if len(created) == 1:
            raise RuntimeError("database went away")
        lesson = ScheduledLesson(**fields)
        created.append(lesson)
        return lesson

    monkeypatch.setattr(assignment_service, "ScheduledLesson", failing_scheduled_lesson)

    with pytest.raises(RuntimeError):
        assign_module_to_class(db, class_id=weekday_class.id, module_id=module.id, start_date=MONDAY)

    assert len(created) == 1
    assert db.execute(select(func.count()).select_from(ModuleAssignment)).scalar() == 0
    assert db.execute(select(func.count()).select_from(ScheduledLesson)).scalar() == 0
