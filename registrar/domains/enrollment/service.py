# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service: the student-facing enroll operation.

This module provides the EnrollmentService class, which runs an enroll
request end to end:

1. Resolve the current academic period (none means enrollment is closed).
2. Load the section and its course.
3. Apply the eligibility rules.
4. Keep an already queued student in place. Otherwise take a seat through
   the ledger, or queue the student when the section is full or the last
   seat was taken concurrently.
5. Commit, then emit exactly one notification describing the outcome.

Rejections are returned as EnrollmentOutcome values. Unexpected errors
roll the transaction back and propagate.

Example:
    service = EnrollmentService(db)
    outcome = await service.enroll(student, section_id=12)
    if outcome.status == OutcomeStatus.WAITLISTED:
        print(outcome.waitlist_position)
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from registrar.core.config import get_settings
from registrar.domains.academic_period import AcademicPeriod, AcademicPeriodService
from registrar.domains.eligibility import EligibilityChecker, RejectionReason
from registrar.domains.eligibility.service import MSG_ALREADY_ENROLLED
from registrar.domains.enrollment.capacity import CapacityArbiter
from registrar.domains.enrollment.ledger import DuplicateEnrollmentError, EnrollmentLedger
from registrar.domains.enrollment.results import (
    MSG_ENROLLMENT_CLOSED,
    MSG_SECTION_NOT_FOUND,
    EnrollmentOutcome,
    OutcomeStatus,
    SeatDecision,
)
from registrar.domains.waitlist import WaitlistService
from registrar.infrastructure.database.models import (
    Course,
    CourseSection,
    Enrollment,
    Student,
)
from registrar.infrastructure.notifications import NotificationEmitter
from registrar.utils.datetime import local_today

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Orchestrates enroll requests and the student's enrollment overview.

    Attributes:
        db: Async database session.
        periods: Academic period resolver.
        ledger: Enrollment ledger (only writer of seat counters).
        checker: Eligibility rules.
        waitlist: Waitlist service for full sections.
        emitter: Notification emitter.
    """

    def __init__(
        self,
        db: AsyncSession,
        emitter: NotificationEmitter | None = None,
    ) -> None:
        self.db = db
        self.periods = AcademicPeriodService(db)
        self.ledger = EnrollmentLedger(db)
        self.checker = EligibilityChecker(db, self.ledger)
        self.emitter = emitter or NotificationEmitter(db)
        self.waitlist = WaitlistService(db, ledger=self.ledger, emitter=self.emitter)

    async def enroll(
        self,
        student: Student,
        section_id: int,
        today: date | None = None,
    ) -> EnrollmentOutcome:
        """Enroll a student in a section, or waitlist them if it is full.

        Args:
            student: Requesting student.
            section_id: Requested section.
            today: Evaluation date; defaults to today in the configured timezone.

        Returns:
            EnrollmentOutcome for the request.
        """
        if today is None:
            today = local_today(get_settings().timezone)

        student_id = student.id
        user_id = student.user_id

        try:
            outcome, course_code = await self._enroll(student, section_id, today)
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Enroll request: student=%s section=%s outcome=%s reason=%s",
            student_id,
            section_id,
            outcome.status.value,
            outcome.reason.value if outcome.reason else None,
        )

        await self._notify(user_id, outcome, course_code)
        return outcome

    async def _enroll(
        self, student: Student, section_id: int, today: date
    ) -> tuple[EnrollmentOutcome, str | None]:
        period = await self.periods.current_period()
        if period is None:
            return (
                EnrollmentOutcome.rejected(
                    section_id, RejectionReason.ENROLLMENT_CLOSED, MSG_ENROLLMENT_CLOSED
                ),
                None,
            )

        section = await self._load_section(section_id)
        if section is None:
            return (
                EnrollmentOutcome.rejected(
                    section_id, RejectionReason.SECTION_NOT_FOUND, MSG_SECTION_NOT_FOUND
                ),
                None,
            )

        course = section.course
        course_code = course.course_code

        eligibility = await self.checker.check(student, section, course, period, today)
        if not eligibility.eligible:
            return (
                EnrollmentOutcome.rejected(
                    section_id,
                    eligibility.reason,
                    eligibility.message,
                    eligibility.missing,
                ),
                course_code,
            )

        student_id = student.id

        # Queued students leave the waitlist only through promote_next
        queued_entry = await self.waitlist.get_entry(student_id, section_id)
        if queued_entry is not None:
            position = await self.waitlist.position(queued_entry)
            entry_id = queued_entry.id
            await self.db.commit()
            return (
                EnrollmentOutcome.waitlisted(section_id, entry_id, position, created=False),
                course_code,
            )

        if CapacityArbiter.try_reserve_seat(section) == SeatDecision.RESERVED:
            try:
                enrollment = await self.ledger.create_enrollment(
                    student_id, section, period.semester_id, period.academic_year_id
                )
            except (DuplicateEnrollmentError, IntegrityError):
                # Concurrent request for the same triple won
                await self.db.rollback()
                return (
                    EnrollmentOutcome.rejected(
                        section_id, RejectionReason.ALREADY_ENROLLED, MSG_ALREADY_ENROLLED
                    ),
                    course_code,
                )

            if enrollment is not None:
                enrollment_id = enrollment.id
                await self.db.commit()
                return EnrollmentOutcome.enrolled(section_id, enrollment_id), course_code

        queued = await self.waitlist.enqueue(student_id, section_id)
        position = await self.waitlist.position(queued.entry)
        entry_id = queued.entry.id
        await self.db.commit()

        return (
            EnrollmentOutcome.waitlisted(section_id, entry_id, position, queued.created),
            course_code,
        )

    async def _notify(
        self, user_id: str, outcome: EnrollmentOutcome, course_code: str | None
    ) -> None:
        code = course_code or ""
        if outcome.status == OutcomeStatus.ENROLLED:
            await self.emitter.notify_enrolled(user_id, code, outcome.section_id)
        elif outcome.status == OutcomeStatus.WAITLISTED:
            await self.emitter.notify_waitlisted(user_id, code, outcome.section_id)
        elif outcome.status == OutcomeStatus.ALREADY_WAITLISTED:
            await self.emitter.notify_already_waitlisted(user_id, code, outcome.section_id)
        else:
            await self.emitter.notify_rejected(
                user_id,
                outcome.reason.value if outcome.reason else "",
                outcome.message,
            )

    async def _load_section(self, section_id: int) -> CourseSection | None:
        query = (
            select(CourseSection)
            .where(CourseSection.id == section_id)
            .options(selectinload(CourseSection.course))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def offered_sections(
        self, student: Student, period: AcademicPeriod
    ) -> list[CourseSection]:
        """Sections of the student's department in the current term.

        Args:
            student: Student browsing the catalog.
            period: Current enrollment period.

        Returns:
            Sections with course and instructor loaded, ordered by course
            code and section name. Empty when the student has no department.
        """
        if student.department_id is None:
            return []

        query = (
            select(CourseSection)
            .join(Course, Course.id == CourseSection.course_id)
            .where(
                Course.department_id == student.department_id,
                CourseSection.semester_id == period.semester_id,
                CourseSection.academic_year_id == period.academic_year_id,
            )
            .options(
                selectinload(CourseSection.course),
                selectinload(CourseSection.instructor),
            )
            .order_by(Course.course_code, CourseSection.section_name)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def current_enrollments(
        self, student: Student, period: AcademicPeriod
    ) -> list[Enrollment]:
        """The student's enrollments in the current semester."""
        query = (
            select(Enrollment)
            .join(CourseSection, CourseSection.id == Enrollment.course_section_id)
            .join(Course, Course.id == CourseSection.course_id)
            .where(
                Enrollment.student_id == student.id,
                Enrollment.semester_id == period.semester_id,
            )
            .options(selectinload(Enrollment.section).selectinload(CourseSection.course))
            .order_by(Course.course_code)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
