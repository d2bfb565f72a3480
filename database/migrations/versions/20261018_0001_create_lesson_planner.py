"""create lesson planner tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


timetable_week = sa.Enum("A", "B", name="timetable_week")
calendar_event_type = sa.Enum("holiday", "closure", "absence", name="calendar_event_type")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("year_group", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=True),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("student_count", sa.Integer(), nullable=True),
        sa.Column("room", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_classes_course_id", "classes", ["course_id"], unique=False)
    op.create_index("ix_classes_academic_year", "classes", ["academic_year"], unique=False)

    op.create_table(
        "timetable_config",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("weeks", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("periods_per_day", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("days_per_week", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("week_zero_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_timetable_config_academic_year", "timetable_config", ["academic_year"], unique=True)

    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("period_start", sa.Integer(), nullable=False),
        sa.Column("period_end", sa.Integer(), nullable=False),
        sa.Column("week", timetable_week, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_timetable_slots_class_id", "timetable_slots", ["class_id"], unique=False)

    op.create_table(
        "calendar_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("type", calendar_event_type, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("affects_all_classes", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_calendar_events_start_date", "calendar_events", ["start_date"], unique=False)
    op.create_index("ix_calendar_events_end_date", "calendar_events", ["end_date"], unique=False)

    op.create_table(
        "modules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_modules_course_id", "modules", ["course_id"], unique=False)

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("module_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_lessons_module_id", "lessons", ["module_id"], unique=False)

    op.create_table(
        "module_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("module_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_module_assignments_class_id", "module_assignments", ["class_id"], unique=False)
    op.create_index("ix_module_assignments_module_id", "module_assignments", ["module_id"], unique=False)

    op.create_table(
        "scheduled_lessons",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("assignment_id", sa.String(length=36), nullable=False),
        sa.Column("lesson_id", sa.String(length=36), nullable=False),
        sa.Column("calendar_date", sa.Date(), nullable=False),
        sa.Column("timetable_slot_id", sa.String(length=36), nullable=True),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_scheduled_lessons_assignment_id", "scheduled_lessons", ["assignment_id"], unique=False)
    op.create_index("ix_scheduled_lessons_calendar_date", "scheduled_lessons", ["calendar_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_scheduled_lessons_calendar_date", table_name="scheduled_lessons")
    op.drop_index("ix_scheduled_lessons_assignment_id", table_name="scheduled_lessons")
    op.drop_table("scheduled_lessons")
    op.drop_index("ix_module_assignments_module_id", table_name="module_assignments")
    op.drop_index("ix_module_assignments_class_id", table_name="module_assignments")
    op.drop_table("module_assignments")
    op.drop_index("ix_lessons_module_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_modules_course_id", table_name="modules")
    op.drop_table("modules")
    op.drop_index("ix_calendar_events_end_date", table_name="calendar_events")
    op.drop_index("ix_calendar_events_start_date", table_name="calendar_events")
    op.drop_table("calendar_events")
    op.drop_index("ix_timetable_slots_class_id", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    op.drop_index("ix_timetable_config_academic_year", table_name="timetable_config")
    op.drop_table("timetable_config")
    op.drop_index("ix_classes_academic_year", table_name="classes")
    op.drop_index("ix_classes_course_id", table_name="classes")
    op.drop_table("classes")
    op.drop_table("courses")
    calendar_event_type.drop(op.get_bind(), checkfirst=True)
    timetable_week.drop(op.get_bind(), checkfirst=True)
