# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial registrar schema.

This migration creates the tables used by the enrollment engine:
- academic_years, semesters: the academic calendar
- departments, levels, programs, courses: the read-only catalog
- course_prerequisites, program_courses: relational prerequisite data
- students, instructors: user profiles
- course_sections: capacity-bounded offerings with the seat counter
- enrollments: student-section bindings per semester
- waitlists: FIFO seat requests for full sections
- notifications: in-app notification center

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-09-01
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all registrar tables."""

    # =========================================================================
    # Academic calendar
    # =========================================================================
    op.create_table(
        "academic_years",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("year_name", sa.String(50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_academic_years"),
        sa.UniqueConstraint("year_name", name="uq_academic_years_year_name"),
    )

    op.create_table(
        "semesters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.Column("semester_name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("registration_deadline", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_semesters"),
        sa.ForeignKeyConstraint(
            ["academic_year_id"],
            ["academic_years.id"],
            name="fk_semesters_academic_year_id_academic_years",
        ),
    )
    op.create_index("ix_semesters_academic_year_id", "semesters", ["academic_year_id"])
    op.create_index("ix_semesters_is_current", "semesters", ["is_current"])

    # =========================================================================
    # Catalog
    # =========================================================================
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("dept_name", sa.String(150), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_departments"),
    )

    op.create_table(
        "levels",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("level_name", sa.String(50), nullable=False),
        sa.Column("level_order", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_levels"),
    )

    op.create_table(
        "programs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("program_name", sa.String(150), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_programs"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_programs_department_id_departments",
        ),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_code", sa.String(20), nullable=False),
        sa.Column("course_name", sa.String(200), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("level_id", sa.Integer(), nullable=True),
        sa.Column("prerequisites", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_courses"),
        sa.UniqueConstraint("course_code", name="uq_courses_course_code"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_courses_department_id_departments",
        ),
        sa.ForeignKeyConstraint(
            ["level_id"], ["levels.id"], name="fk_courses_level_id_levels"
        ),
    )
    op.create_index("ix_courses_department_id", "courses", ["department_id"])

    op.create_table(
        "course_prerequisites",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("prereq_course_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_course_prerequisites"),
        sa.UniqueConstraint(
            "course_id",
            "prereq_course_id",
            name="uq_course_prerequisites_course_id_prereq_course_id",
        ),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name="fk_course_prerequisites_course_id_courses",
        ),
        sa.ForeignKeyConstraint(
            ["prereq_course_id"],
            ["courses.id"],
            name="fk_course_prerequisites_prereq_course_id_courses",
        ),
    )
    op.create_index(
        "ix_course_prerequisites_course_id", "course_prerequisites", ["course_id"]
    )

    op.create_table(
        "program_courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id", name="pk_program_courses"),
        sa.UniqueConstraint(
            "program_id", "course_id", name="uq_program_courses_program_id_course_id"
        ),
        sa.ForeignKeyConstraint(
            ["program_id"],
            ["programs.id"],
            name="fk_program_courses_program_id_programs",
        ),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name="fk_program_courses_course_id_courses",
        ),
    )
    op.create_index("ix_program_courses_program_id", "program_courses", ["program_id"])

    # =========================================================================
    # People
    # =========================================================================
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("student_number", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("current_level_id", sa.Integer(), nullable=True),
        sa.Column("program_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("student_number", name="uq_students_student_number"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_students_department_id_departments",
        ),
        sa.ForeignKeyConstraint(
            ["current_level_id"],
            ["levels.id"],
            name="fk_students_current_level_id_levels",
        ),
        sa.ForeignKeyConstraint(
            ["program_id"], ["programs.id"], name="fk_students_program_id_programs"
        ),
    )
    op.create_index("ix_students_user_id", "students", ["user_id"], unique=True)

    op.create_table(
        "instructors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_instructors"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_instructors_department_id_departments",
        ),
    )
    op.create_index("ix_instructors_user_id", "instructors", ["user_id"], unique=True)

    # =========================================================================
    # Sections, enrollments, waitlists
    # =========================================================================
    op.create_table(
        "course_sections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("semester_id", sa.Integer(), nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.Column("section_name", sa.String(50), nullable=False),
        sa.Column("schedule", sa.String(200), nullable=True),
        sa.Column("room", sa.String(100), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("enrolled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("registration_deadline", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_course_sections"),
        sa.CheckConstraint(
            "capacity >= 0", name="ck_course_sections_capacity_non_negative"
        ),
        sa.CheckConstraint(
            "enrolled_count >= 0 AND enrolled_count <= capacity",
            name="ck_course_sections_enrolled_within_capacity",
        ),
        sa.ForeignKeyConstraint(
            ["course_id"], ["courses.id"], name="fk_course_sections_course_id_courses"
        ),
        sa.ForeignKeyConstraint(
            ["instructor_id"],
            ["instructors.id"],
            name="fk_course_sections_instructor_id_instructors",
        ),
        sa.ForeignKeyConstraint(
            ["semester_id"],
            ["semesters.id"],
            name="fk_course_sections_semester_id_semesters",
        ),
        sa.ForeignKeyConstraint(
            ["academic_year_id"],
            ["academic_years.id"],
            name="fk_course_sections_academic_year_id_academic_years",
        ),
    )
    op.create_index("ix_course_sections_course_id", "course_sections", ["course_id"])
    op.create_index(
        "ix_course_sections_instructor_id", "course_sections", ["instructor_id"]
    )
    op.create_index("ix_course_sections_semester_id", "course_sections", ["semester_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("course_section_id", sa.Integer(), nullable=False),
        sa.Column("semester_id", sa.Integer(), nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="enrolled"),
        sa.Column("final_grade", sa.String(5), nullable=True),
        sa.Column("enrollment_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_enrollments"),
        sa.UniqueConstraint(
            "student_id",
            "course_section_id",
            "semester_id",
            name="uq_enrollments_student_id_course_section_id_semester_id",
        ),
        sa.ForeignKeyConstraint(
            ["student_id"], ["students.id"], name="fk_enrollments_student_id_students"
        ),
        sa.ForeignKeyConstraint(
            ["course_section_id"],
            ["course_sections.id"],
            name="fk_enrollments_course_section_id_course_sections",
        ),
        sa.ForeignKeyConstraint(
            ["semester_id"],
            ["semesters.id"],
            name="fk_enrollments_semester_id_semesters",
        ),
        sa.ForeignKeyConstraint(
            ["academic_year_id"],
            ["academic_years.id"],
            name="fk_enrollments_academic_year_id_academic_years",
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index(
        "ix_enrollments_course_section_id", "enrollments", ["course_section_id"]
    )

    op.create_table(
        "waitlists",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("course_section_id", sa.Integer(), nullable=False),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_waitlists"),
        sa.UniqueConstraint(
            "student_id",
            "course_section_id",
            name="uq_waitlists_student_id_course_section_id",
        ),
        sa.ForeignKeyConstraint(
            ["student_id"], ["students.id"], name="fk_waitlists_student_id_students"
        ),
        sa.ForeignKeyConstraint(
            ["course_section_id"],
            ["course_sections.id"],
            name="fk_waitlists_course_section_id_course_sections",
        ),
    )
    op.create_index(
        "ix_waitlists_queue_order",
        "waitlists",
        ["course_section_id", "requested_at", "id"],
    )

    # =========================================================================
    # Notifications
    # =========================================================================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    """Drop all registrar tables in reverse dependency order."""
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_waitlists_queue_order", table_name="waitlists")
    op.drop_table("waitlists")

    op.drop_index("ix_enrollments_course_section_id", table_name="enrollments")
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_table("enrollments")

    op.drop_index("ix_course_sections_semester_id", table_name="course_sections")
    op.drop_index("ix_course_sections_instructor_id", table_name="course_sections")
    op.drop_index("ix_course_sections_course_id", table_name="course_sections")
    op.drop_table("course_sections")

    op.drop_index("ix_instructors_user_id", table_name="instructors")
    op.drop_table("instructors")
    op.drop_index("ix_students_user_id", table_name="students")
    op.drop_table("students")

    op.drop_index("ix_program_courses_program_id", table_name="program_courses")
    op.drop_table("program_courses")
    op.drop_index("ix_course_prerequisites_course_id", table_name="course_prerequisites")
    op.drop_table("course_prerequisites")
    op.drop_index("ix_courses_department_id", table_name="courses")
    op.drop_table("courses")
    op.drop_table("programs")
    op.drop_table("levels")
    op.drop_table("departments")

    op.drop_index("ix_semesters_is_current", table_name="semesters")
    op.drop_index("ix_semesters_academic_year_id", table_name="semesters")
    op.drop_table("semesters")
    op.drop_table("academic_years")
