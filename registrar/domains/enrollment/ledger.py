# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment ledger: the only writer of enrollments and seat counters.

The ledger keeps course_sections.enrolled_count equal to the number of
enrollments with status 'enrolled' for the section. Creating an enrollment
takes the seat through the CapacityArbiter first and then writes the row,
both inside the caller's transaction. The ledger never commits.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.enrollment.capacity import CapacityArbiter
from registrar.domains.enrollment.results import SectionCountDrift
from registrar.infrastructure.database.models import (
    ENROLLMENT_STATUS_ENROLLED,
    ENROLLMENT_STATUS_WITHDRAWN,
    Course,
    CourseSection,
    Enrollment,
)
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentLedgerError(Exception):
    """Base exception for enrollment ledger errors."""

    pass


class DuplicateEnrollmentError(EnrollmentLedgerError):
    """Raised when the student already holds a non-withdrawn enrollment."""

    pass


class EnrollmentLedger:
    """Reads and writes enrollment records.

    Attributes:
        db: Async database session.
        arbiter: Capacity arbiter used for the guarded increment.
    """

    def __init__(self, db: AsyncSession, arbiter: CapacityArbiter | None = None) -> None:
        self.db = db
        self.arbiter = arbiter or CapacityArbiter(db)

    async def create_enrollment(
        self,
        student_id: int,
        section: CourseSection,
        semester_id: int,
        academic_year_id: int,
    ) -> Enrollment | None:
        """Take a seat and record the enrollment.

        A withdrawn enrollment for the same (student, section, semester) is
        reactivated instead of inserting a second row.

        Args:
            student_id: Enrolling student.
            section: Target section.
            semester_id: Semester of the enrollment.
            academic_year_id: Academic year of the enrollment.

        Returns:
            The active Enrollment, or None when the section was full at the
            moment of the guarded increment. Nothing is written in that case.

        Raises:
            DuplicateEnrollmentError: If a non-withdrawn enrollment exists.
        """
        existing = await self.get_enrollment(student_id, section.id, semester_id)
        if existing is not None and existing.status != ENROLLMENT_STATUS_WITHDRAWN:
            raise DuplicateEnrollmentError(
                f"Student {student_id} already has an enrollment in section {section.id}"
            )

        if not await self.arbiter.reserve_seat_if_available(section.id):
            return None

        if existing is not None:
            existing.status = ENROLLMENT_STATUS_ENROLLED
            existing.final_grade = None
            existing.enrollment_date = utc_now()
            enrollment = existing
        else:
            enrollment = Enrollment(
                student_id=student_id,
                course_section_id=section.id,
                semester_id=semester_id,
                academic_year_id=academic_year_id,
                status=ENROLLMENT_STATUS_ENROLLED,
                enrollment_date=utc_now(),
            )
            self.db.add(enrollment)

        await self.db.flush()
        await self.db.refresh(section, attribute_names=["enrolled_count"])

        logger.info(
            "Student %s enrolled in section %s (%s/%s)",
            student_id,
            section.id,
            section.enrolled_count,
            section.capacity,
        )
        return enrollment

    async def get_enrollment(
        self, student_id: int, section_id: int, semester_id: int
    ) -> Enrollment | None:
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_section_id == section_id,
            Enrollment.semester_id == semester_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def has_active_enrollment(
        self, student_id: int, section_id: int, semester_id: int | None = None
    ) -> bool:
        query = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_section_id == section_id,
            Enrollment.status == ENROLLMENT_STATUS_ENROLLED,
        )
        if semester_id is not None:
            query = query.where(Enrollment.semester_id == semester_id)
        result = await self.db.execute(query.limit(1))
        return result.first() is not None

    async def has_completed_course(self, student_id: int, course_id: int) -> bool:
        """Whether the student has a graded enrollment in any section of a course."""
        return course_id in await self.completed_course_ids(student_id)

    async def completed_course_codes(self, student_id: int) -> set[str]:
        """Upper-cased codes of courses the student has a final grade in."""
        query = (
            select(Course.course_code)
            .join(CourseSection, CourseSection.course_id == Course.id)
            .join(Enrollment, Enrollment.course_section_id == CourseSection.id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.final_grade.is_not(None),
            )
            .distinct()
        )
        result = await self.db.execute(query)
        return {code.upper() for code in result.scalars()}

    async def completed_course_ids(self, student_id: int) -> set[int]:
        """Ids of courses the student has a final grade in."""
        query = (
            select(CourseSection.course_id)
            .join(Enrollment, Enrollment.course_section_id == CourseSection.id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.final_grade.is_not(None),
            )
            .distinct()
        )
        result = await self.db.execute(query)
        return set(result.scalars())

    async def count_active(self, section_id: int) -> int:
        query = select(func.count(Enrollment.id)).where(
            Enrollment.course_section_id == section_id,
            Enrollment.status == ENROLLMENT_STATUS_ENROLLED,
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def audit_counts(self) -> list[SectionCountDrift]:
        """List sections whose cached counter disagrees with their enrollments.

        Returns:
            One SectionCountDrift per inconsistent section, ordered by id.
            An empty list means the counter invariant holds everywhere.
        """
        active = (
            select(
                Enrollment.course_section_id.label("section_id"),
                func.count(Enrollment.id).label("active_count"),
            )
            .where(Enrollment.status == ENROLLMENT_STATUS_ENROLLED)
            .group_by(Enrollment.course_section_id)
            .subquery()
        )
        active_count = func.coalesce(active.c.active_count, 0)

        query = (
            select(
                CourseSection.id,
                CourseSection.enrolled_count,
                CourseSection.capacity,
                active_count,
            )
            .outerjoin(active, active.c.section_id == CourseSection.id)
            .where(CourseSection.enrolled_count != active_count)
            .order_by(CourseSection.id)
        )
        result = await self.db.execute(query)

        drifts = [
            SectionCountDrift(
                section_id=section_id,
                enrolled_count=enrolled_count,
                active_count=count,
                capacity=capacity,
            )
            for section_id, enrolled_count, capacity, count in result.all()
        ]
        if drifts:
            logger.warning("Seat counter drift detected in %d sections", len(drifts))
        return drifts
