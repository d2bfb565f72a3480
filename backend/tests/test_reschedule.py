from datetime import date

import pytest

from app.core.config import get_settings
from app.core.exceptions import ResourceNotFoundError, UnsatisfiablePlacementError
from app.services.assignment import assign_module_to_class
from app.services.lesson_queries import find_year_config
from app.services.reschedule import reschedule_lessons_for_event

MONDAY = date(2024, 9, 2)


def schedule_week(db, planner, teaching_class, count=5):
    module = planner.single_lessons(count)
    assign_module_to_class(db, class_id=teaching_class.id, module_id=module.id, start_date=MONDAY)
    return planner.lessons_for_class(teaching_class.id)


def dates(planner, class_id):
    return [lesson.calendar_date for lesson in planner.lessons_for_class(class_id)]


def test_single_day_holiday_cascades_later_lessons(db, planner, weekday_class):
    lessons = schedule_week(db, planner, weekday_class)
    event = planner.event(date(2024, 9, 4))

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.lessons_rescheduled == 3
    assert result.rescheduled_lesson_ids == [lesson.id for lesson in lessons[2:]]
    assert [(change.old_date, change.new_date) for change in result.changes] == [
        (date(2024, 9, 4), date(2024, 9, 5)),
        (date(2024, 9, 5), date(2024, 9, 6)),
        (date(2024, 9, 6), date(2024, 9, 9)),
    ]
    assert dates(planner, weekday_class.id) == [
        date(2024, 9, 2),
        date(2024, 9, 3),
        date(2024, 9, 5),
        date(2024, 9, 6),
        date(2024, 9, 9),
    ]


def test_multi_day_event_moves_everything_inside_it(db, planner, weekday_class):
    schedule_week(db, planner, weekday_class)
    event = planner.event(date(2024, 9, 3), date(2024, 9, 4), title="Trip")

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.lessons_rescheduled == 4
    assert dates(planner, weekday_class.id) == [
        date(2024, 9, 2),
        date(2024, 9, 5),
        date(2024, 9, 6),
        date(2024, 9, 9),
        date(2024, 9, 10),
    ]


def test_later_events_stay_blocked(db, planner, weekday_class):
    schedule_week(db, planner, weekday_class)
    planner.event(date(2024, 9, 9), title="INSET day")
    event = planner.event(date(2024, 9, 4))

    reschedule_lessons_for_event(db, event_id=event.id)

    assert dates(planner, weekday_class.id)[2:] == [date(2024, 9, 5), date(2024, 9, 6), date(2024, 9, 10)]


def test_each_class_is_rescheduled(db, planner, weekday_class):
    other_class = planner.teaching_class([(day, 2, 2) for day in (1, 2, 3, 4, 5)], name="10Y/Ph2")
    schedule_week(db, planner, weekday_class)
    schedule_week(db, planner, other_class)
    event = planner.event(date(2024, 9, 4))

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.lessons_rescheduled == 6
    assert dates(planner, weekday_class.id) == dates(planner, other_class.id)


def test_event_without_lessons_changes_nothing(db, planner, weekday_class):
    schedule_week(db, planner, weekday_class)
    event = planner.event(date(2024, 9, 7), date(2024, 9, 8))

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.lessons_rescheduled == 0
    assert result.changes == []


def test_preview_does_not_write(db, planner, weekday_class):
    lessons = schedule_week(db, planner, weekday_class)
    original = [lesson.calendar_date for lesson in lessons]
    event = planner.event(date(2024, 9, 2))

    result = reschedule_lessons_for_event(db, event_id=event.id, preview=True)

    assert result.lessons_rescheduled == 5
    assert dates(planner, weekday_class.id) == original


def test_class_without_year_configuration_is_skipped(db, planner, weekday_class):
    schedule_week(db, planner, weekday_class)
    db.delete(find_year_config(db, weekday_class.academic_year))
    db.commit()
    event = planner.event(date(2024, 9, 4))

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.lessons_rescheduled == 0
    assert dates(planner, weekday_class.id)[2] == date(2024, 9, 4)


def test_unknown_event(db):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        reschedule_lessons_for_event(db, event_id="missing")
    assert exc_info.value.message == "Calendar event not found"


def test_two_week_timetable_keeps_week_labels(db, planner):
    planner.week_cycle(2)
    planner.year_config("2024-25", week_zero_date=MONDAY)
    teaching_class = planner.teaching_class([(1, 1, 1, "A"), (3, 1, 1, "B")])
    lessons = schedule_week(db, planner, teaching_class, count=3)
    assert [lesson.calendar_date for lesson in lessons] == [date(2024, 9, 2), date(2024, 9, 11), date(2024, 9, 16)]
    event = planner.event(date(2024, 9, 11), title="Inset day")

    result = reschedule_lessons_for_event(db, event_id=event.id)

    assert result.rescheduled_lesson_ids == [lesson.id for lesson in lessons[1:]]
    assert dates(planner, teaching_class.id) == [date(2024, 9, 2), date(2024, 9, 16), date(2024, 9, 25)]


def test_preview_fails_the_same_way_as_apply(db, planner, weekday_class):
    lessons = schedule_week(db, planner, weekday_class)
    event = planner.event(date(2024, 9, 4))
    settings = get_settings().model_copy(update={"cascade_search_days": 2})

    with pytest.raises(UnsatisfiablePlacementError) as preview_info:
        reschedule_lessons_for_event(db, event_id=event.id, preview=True, settings=settings)
    with pytest.raises(UnsatisfiablePlacementError) as apply_info:
        reschedule_lessons_for_event(db, event_id=event.id, settings=settings)

    assert preview_info.value.message == apply_info.value.message
    assert preview_info.value.item_id == lessons[4].id
    assert dates(planner, weekday_class.id)[2:] == [date(2024, 9, 4), date(2024, 9, 5), date(2024, 9, 6)]
