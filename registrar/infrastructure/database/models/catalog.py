# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic catalog models read by the enrollment engine.

Catalog administration lives elsewhere; these tables are only read here.
Prerequisites come from two independent sources:
- Course.prerequisites: free-text, comma-separated course codes.
- CoursePrerequisite: relational edges, applied per program through
  ProgramCourse membership.
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.infrastructure.database.models.base import Base, TimestampMixin


class Department(Base, TimestampMixin):
    """An academic department."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dept_name: Mapped[str] = mapped_column(String(150), nullable=False)


class Level(Base, TimestampMixin):
    """A study level (e.g. 100, 200). level_order drives the level match rule."""

    __tablename__ = "levels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level_name: Mapped[str] = mapped_column(String(50), nullable=False)
    level_order: Mapped[int] = mapped_column(Integer, nullable=False)


class Program(Base, TimestampMixin):
    """A degree program offered by a department."""

    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    program_name: Mapped[str] = mapped_column(String(150), nullable=False)
    department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id"), nullable=True
    )


class Course(Base, TimestampMixin):
    """A catalog course."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id"), nullable=True, index=True
    )
    level_id: Mapped[int | None] = mapped_column(ForeignKey("levels.id"), nullable=True)
    prerequisites: Mapped[str | None] = mapped_column(Text, nullable=True)

    level: Mapped[Level | None] = relationship()

    def __repr__(self) -> str:
        return f"<Course {self.course_code}>"


class CoursePrerequisite(Base):
    """Edge: course_id requires prereq_course_id to be completed."""

    __tablename__ = "course_prerequisites"
    __table_args__ = (UniqueConstraint("course_id", "prereq_course_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    prereq_course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)

    prereq_course: Mapped[Course] = relationship(foreign_keys=[prereq_course_id])


class ProgramCourse(Base):
    """Membership of a course in a program's course list."""

    __tablename__ = "program_courses"
    __table_args__ = (UniqueConstraint("program_id", "course_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
