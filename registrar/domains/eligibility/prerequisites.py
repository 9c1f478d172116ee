# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite checks.

Prerequisites come from two independent sources and are checked
separately, each reporting its own missing courses:

- FreeTextPrerequisiteCheck: the comma-separated course codes stored on
  the course itself, matched against completed course codes.
- ProgramPrerequisiteCheck: course_prerequisites edges, applied only when
  the course belongs to the student's program, matched against completed
  course ids.

A course counts as completed once the student has an enrollment in any of
its sections with a final grade.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.infrastructure.database.models import (
    Course,
    CoursePrerequisite,
    ProgramCourse,
    Student,
)

if TYPE_CHECKING:
    from registrar.domains.enrollment.ledger import EnrollmentLedger

logger = logging.getLogger(__name__)


def parse_prerequisite_codes(text: str | None) -> list[str]:
    """Split a free-text prerequisite list into normalized course codes.

    Example:
        >>> parse_prerequisite_codes(" cs101, ,Math200 ")
        ['CS101', 'MATH200']
    """
    if not text:
        return []

    codes: list[str] = []
    for raw in text.split(","):
        code = raw.strip().upper()
        if code and code not in codes:
            codes.append(code)
    return codes


class FreeTextPrerequisiteCheck:
    """Checks the free-text prerequisite list of a course."""

    def __init__(self, ledger: EnrollmentLedger) -> None:
        self.ledger = ledger

    async def missing_for(self, student_id: int, course: Course) -> list[str]:
        """Required codes the student has not completed, in listed order."""
        required = parse_prerequisite_codes(course.prerequisites)
        if not required:
            return []

        completed = await self.ledger.completed_course_codes(student_id)
        return [code for code in required if code not in completed]


class ProgramPrerequisiteCheck:
    """Checks relational prerequisites scoped to the student's program."""

    def __init__(self, db: AsyncSession, ledger: EnrollmentLedger) -> None:
        self.db = db
        self.ledger = ledger

    async def missing_for(self, student: Student, course_id: int) -> list[str]:
        """Codes of program prerequisites not yet completed, sorted.

        Students without a program have no program prerequisites.
        """
        if student.program_id is None:
            return []

        query = (
            select(CoursePrerequisite.prereq_course_id, Course.course_code)
            .join(Course, Course.id == CoursePrerequisite.prereq_course_id)
            .join(
                ProgramCourse,
                and_(
                    ProgramCourse.course_id == CoursePrerequisite.course_id,
                    ProgramCourse.program_id == student.program_id,
                ),
            )
            .where(CoursePrerequisite.course_id == course_id)
        )
        rows = (await self.db.execute(query)).all()
        if not rows:
            return []

        completed = await self.ledger.completed_course_ids(student.id)
        missing = {code for prereq_id, code in rows if prereq_id not in completed}

        if missing:
            logger.debug(
                "Student %s missing program prerequisites for course %s: %s",
                student.id,
                course_id,
                sorted(missing),
            )
        return sorted(missing)
