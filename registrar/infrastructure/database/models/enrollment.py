# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section, enrollment and waitlist models.

CourseSection.enrolled_count is a cached aggregate of the enrollments with
status 'enrolled' for that section. It is written only through the guarded
increment in EnrollmentLedger, and the table constraint keeps it within
0..capacity.
"""

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.infrastructure.database.models.base import Base, TimestampMixin
from registrar.infrastructure.database.models.catalog import Course
from registrar.infrastructure.database.models.people import Instructor, Student
from registrar.infrastructure.database.models.term import AcademicYear, Semester
from registrar.utils.datetime import utc_now

ENROLLMENT_STATUS_ENROLLED = "enrolled"
ENROLLMENT_STATUS_COMPLETED = "completed"
ENROLLMENT_STATUS_WITHDRAWN = "withdrawn"


class CourseSection(Base, TimestampMixin):
    """A scheduled offering of a course in one semester."""

    __tablename__ = "course_sections"
    __table_args__ = (
        CheckConstraint("capacity >= 0", name="capacity_non_negative"),
        CheckConstraint(
            "enrolled_count >= 0 AND enrolled_count <= capacity",
            name="enrolled_within_capacity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    instructor_id: Mapped[int] = mapped_column(
        ForeignKey("instructors.id"), nullable=False, index=True
    )
    semester_id: Mapped[int] = mapped_column(ForeignKey("semesters.id"), nullable=False, index=True)
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id"), nullable=False
    )
    section_name: Mapped[str] = mapped_column(String(50), nullable=False)
    schedule: Mapped[str | None] = mapped_column(String(200), nullable=True)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    enrolled_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    registration_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    course: Mapped[Course] = relationship()
    instructor: Mapped[Instructor] = relationship()
    semester: Mapped[Semester] = relationship()
    academic_year: Mapped[AcademicYear] = relationship()

    @property
    def has_free_seat(self) -> bool:
        return self.enrolled_count < self.capacity

    def __repr__(self) -> str:
        return f"<CourseSection {self.id} {self.enrolled_count}/{self.capacity}>"


class Enrollment(Base, TimestampMixin):
    """Binding of a student to a section for one semester."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_section_id", "semester_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), nullable=False, index=True)
    course_section_id: Mapped[int] = mapped_column(
        ForeignKey("course_sections.id"), nullable=False, index=True
    )
    semester_id: Mapped[int] = mapped_column(ForeignKey("semesters.id"), nullable=False)
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=ENROLLMENT_STATUS_ENROLLED, nullable=False
    )
    final_grade: Mapped[str | None] = mapped_column(String(5), nullable=True)
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    student: Mapped[Student] = relationship()
    section: Mapped[CourseSection] = relationship()

    @property
    def is_active(self) -> bool:
        return self.status == ENROLLMENT_STATUS_ENROLLED


class WaitlistEntry(Base):
    """An open request for a seat in a full section.

    Ordered by (requested_at, id); the id breaks ties between requests that
    share a timestamp.
    """

    __tablename__ = "waitlists"
    __table_args__ = (
        UniqueConstraint("student_id", "course_section_id"),
        Index("ix_waitlists_queue_order", "course_section_id", "requested_at", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), nullable=False)
    course_section_id: Mapped[int] = mapped_column(
        ForeignKey("course_sections.id"), nullable=False
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    student: Mapped[Student] = relationship()

    def __repr__(self) -> str:
        return f"<WaitlistEntry {self.id} student={self.student_id} section={self.course_section_id}>"
