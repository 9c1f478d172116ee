# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the registrar database.

Importing this package registers every table on Base.metadata, which is
what Alembic and the test fixtures rely on.
"""

from registrar.infrastructure.database.models.base import Base, TimestampMixin
from registrar.infrastructure.database.models.catalog import (
    Course,
    CoursePrerequisite,
    Department,
    Level,
    Program,
    ProgramCourse,
)
from registrar.infrastructure.database.models.enrollment import (
    ENROLLMENT_STATUS_COMPLETED,
    ENROLLMENT_STATUS_ENROLLED,
    ENROLLMENT_STATUS_WITHDRAWN,
    CourseSection,
    Enrollment,
    WaitlistEntry,
)
from registrar.infrastructure.database.models.notification import Notification
from registrar.infrastructure.database.models.people import Instructor, Student
from registrar.infrastructure.database.models.term import AcademicYear, Semester

__all__ = [
    "Base",
    "TimestampMixin",
    # Calendar
    "AcademicYear",
    "Semester",
    # Catalog
    "Department",
    "Level",
    "Program",
    "Course",
    "CoursePrerequisite",
    "ProgramCourse",
    # People
    "Student",
    "Instructor",
    # Enrollment
    "CourseSection",
    "Enrollment",
    "WaitlistEntry",
    "ENROLLMENT_STATUS_ENROLLED",
    "ENROLLMENT_STATUS_COMPLETED",
    "ENROLLMENT_STATUS_WITHDRAWN",
    # Notifications
    "Notification",
]
