# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility checker for enrollment requests.

Rules run in a fixed order and stop at the first failure:

1. Term: the section belongs to the current semester and academic year.
2. Window: today is on or after the semester start date and on or before
   the effective deadline.
3. Duplicate: no non-withdrawn enrollment in this section this semester.
4. Level: when both the course and the student have a level, their level
   orders are equal.
5. Course prerequisites: every free-text prerequisite code is completed.
6. Program prerequisites: every prerequisite of the course within the
   student's program is completed.

The checker only reads.

Example:
    checker = EligibilityChecker(db, ledger)
    result = await checker.check(student, section, period, today)
    if not result.eligible:
        return result.message
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.academic_period import AcademicPeriod
from registrar.domains.eligibility.prerequisites import (
    FreeTextPrerequisiteCheck,
    ProgramPrerequisiteCheck,
)
from registrar.domains.eligibility.results import EligibilityResult, RejectionReason
from registrar.infrastructure.database.models import (
    ENROLLMENT_STATUS_WITHDRAWN,
    Course,
    CourseSection,
    Level,
    Student,
)

if TYPE_CHECKING:
    from registrar.domains.enrollment.ledger import EnrollmentLedger

logger = logging.getLogger(__name__)

MSG_TERM_MISMATCH = "Section does not belong to the selected term."
MSG_WINDOW_NOT_OPEN = "Enrollment has not opened yet for this term."
MSG_WINDOW_CLOSED = "Enrollment is closed for this term."
MSG_ALREADY_ENROLLED = "You are already enrolled in this section."
MSG_LEVEL_MISMATCH = "You can only enroll in courses that match your current level."


class EligibilityChecker:
    """Applies the enrollment rules to a (student, section) pair.

    Attributes:
        db: Async database session.
        ledger: Enrollment ledger used for enrollment history.
    """

    def __init__(self, db: AsyncSession, ledger: EnrollmentLedger) -> None:
        self.db = db
        self.ledger = ledger
        self.course_prerequisites = FreeTextPrerequisiteCheck(ledger)
        self.program_prerequisites = ProgramPrerequisiteCheck(db, ledger)

    async def check(
        self,
        student: Student,
        section: CourseSection,
        course: Course,
        period: AcademicPeriod,
        today: date,
    ) -> EligibilityResult:
        """Run every rule in order.

        Args:
            student: Requesting student.
            section: Requested section.
            course: Course the section belongs to.
            period: Current enrollment period.
            today: Date the request is evaluated on.

        Returns:
            EligibilityResult.passed() or the first failing rule.
        """
        if (
            section.semester_id != period.semester_id
            or section.academic_year_id != period.academic_year_id
        ):
            return EligibilityResult.rejected(RejectionReason.TERM_MISMATCH, MSG_TERM_MISMATCH)

        window = self.check_window(period, section, today)
        if not window.eligible:
            return window

        existing = await self.ledger.get_enrollment(student.id, section.id, period.semester_id)
        if existing is not None and existing.status != ENROLLMENT_STATUS_WITHDRAWN:
            return EligibilityResult.rejected(
                RejectionReason.ALREADY_ENROLLED, MSG_ALREADY_ENROLLED
            )

        if not await self._levels_match(student, course):
            return EligibilityResult.rejected(RejectionReason.LEVEL_MISMATCH, MSG_LEVEL_MISMATCH)

        missing = await self.course_prerequisites.missing_for(student.id, course)
        if missing:
            return EligibilityResult.rejected(
                RejectionReason.MISSING_PREREQUISITES,
                f"Missing prerequisites: {', '.join(missing)}.",
                missing,
            )

        missing = await self.program_prerequisites.missing_for(student, course.id)
        if missing:
            return EligibilityResult.rejected(
                RejectionReason.MISSING_PROGRAM_PREREQUISITES,
                f"Missing prerequisite courses for your program: {', '.join(missing)}.",
                missing,
            )

        return EligibilityResult.passed()

    @staticmethod
    def check_window(
        period: AcademicPeriod, section: CourseSection, today: date
    ) -> EligibilityResult:
        """Enrollment window rule; both bounds are inclusive."""
        if period.start_date is not None and today < period.start_date:
            return EligibilityResult.rejected(
                RejectionReason.WINDOW_NOT_OPEN, MSG_WINDOW_NOT_OPEN
            )

        deadline = period.deadline_for(section.registration_deadline)
        if deadline is not None and today > deadline:
            return EligibilityResult.rejected(RejectionReason.WINDOW_CLOSED, MSG_WINDOW_CLOSED)

        return EligibilityResult.passed()

    async def _levels_match(self, student: Student, course: Course) -> bool:
        if course.level_id is None or student.current_level_id is None:
            return True

        course_level = await self.db.get(Level, course.level_id)
        student_level = await self.db.get(Level, student.current_level_id)
        if course_level is None or student_level is None:
            return True

        return course_level.level_order == student_level.level_order
