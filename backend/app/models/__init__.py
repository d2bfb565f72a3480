from app.models.assignment import ModuleAssignment, ScheduledLesson  # noqa: F401
from app.models.calendar_event import CalendarEvent, CalendarEventType  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.module import Lesson, Module  # noqa: F401
from app.models.teaching_class import TeachingClass  # noqa: F401
from app.models.timetable import GLOBAL_CONFIG_KEY, TimetableConfig, TimetableSlot, TimetableWeek  # noqa: F401
