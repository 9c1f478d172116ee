# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist service for full course sections.

This module provides the WaitlistService class for:
- Queueing a student for a full section (idempotent)
- Promoting the head of the queue when a seat is free
- Removing entries and reporting queue positions

Queue order is (requested_at ASC, id ASC). A waitlisted student only ever
becomes enrolled through promote_next.

Example:
    service = WaitlistService(db)
    result = await service.promote_next(section_id)
    if result.status == PromotionStatus.PROMOTED:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from registrar.domains.academic_period import AcademicPeriodService
from registrar.domains.enrollment.ledger import EnrollmentLedger
from registrar.infrastructure.database.models import (
    ENROLLMENT_STATUS_WITHDRAWN,
    CourseSection,
    Student,
    WaitlistEntry,
)
from registrar.infrastructure.notifications import NotificationEmitter
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class PromotionStatus(str, Enum):
    """Result of a promote-next request."""

    PROMOTED = "promoted"
    EMPTY_QUEUE = "empty_queue"
    SECTION_FULL = "section_full"
    SECTION_NOT_FOUND = "section_not_found"
    TERM_CLOSED = "term_closed"


PROMOTION_MESSAGES = {
    PromotionStatus.PROMOTED: "Promoted next student from waitlist",
    PromotionStatus.EMPTY_QUEUE: "No students on waitlist",
    PromotionStatus.SECTION_FULL: "No available seats in this section",
    PromotionStatus.SECTION_NOT_FOUND: "Section not found",
    PromotionStatus.TERM_CLOSED: "Section is not in the current enrollment term",
}


class RemovalStatus(str, Enum):
    """Result of a waitlist removal."""

    REMOVED = "removed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of promote_next.

    Attributes:
        status: What happened.
        section_id: Section the promotion ran on.
        student_id: Promoted student, set only for PROMOTED.
        enrollment_id: Created enrollment, set only for PROMOTED.
        stale_entries_removed: Entries dropped because their student was
            already enrolled in the section.
    """

    status: PromotionStatus
    section_id: int
    student_id: int | None = None
    enrollment_id: int | None = None
    stale_entries_removed: int = 0

    @property
    def message(self) -> str:
        return PROMOTION_MESSAGES[self.status]


@dataclass
class EnqueueResult:
    """Outcome of enqueue. created is False when the student was already queued."""

    entry: WaitlistEntry
    created: bool


@dataclass
class WaitlistSectionView:
    """A section with the number of queued students."""

    section: CourseSection
    waitlist_count: int


class WaitlistService:
    """Manages the per-section FIFO waitlists.

    Attributes:
        db: Async database session.
        ledger: Enrollment ledger used to enroll promoted students.
        emitter: Notification emitter for promotions.
    """

    def __init__(
        self,
        db: AsyncSession,
        ledger: EnrollmentLedger | None = None,
        emitter: NotificationEmitter | None = None,
    ) -> None:
        self.db = db
        self.ledger = ledger or EnrollmentLedger(db)
        self.emitter = emitter or NotificationEmitter(db)

    async def enqueue(self, student_id: int, section_id: int) -> EnqueueResult:
        """Add a student to a section's waitlist.

        Runs inside the caller's transaction and does not commit. A second
        request for the same pair, including a concurrent one caught by the
        unique constraint, returns the existing entry.

        Args:
            student_id: Student to queue.
            section_id: Full section.

        Returns:
            EnqueueResult with the entry and whether it was created.
        """
        existing = await self.get_entry(student_id, section_id)
        if existing is not None:
            return EnqueueResult(entry=existing, created=False)

        entry = WaitlistEntry(
            student_id=student_id,
            course_section_id=section_id,
            requested_at=utc_now(),
        )
        try:
            async with self.db.begin_nested():
                self.db.add(entry)
        except IntegrityError:
            existing = await self.get_entry(student_id, section_id)
            if existing is None:
                raise
            logger.info(
                "Concurrent waitlist insert for student %s in section %s",
                student_id,
                section_id,
            )
            return EnqueueResult(entry=existing, created=False)

        logger.info("Student %s waitlisted for section %s", student_id, section_id)
        return EnqueueResult(entry=entry, created=True)

    async def promote_next(self, section_id: int) -> PromotionResult:
        """Enroll the student at the head of the queue.

        The section row is locked for the whole operation so concurrent
        promotions for one section run one after another. Sections outside
        the current term are refused with TERM_CLOSED. Head entries whose
        student already holds an enrollment in the section are dropped and
        the next entry is tried. Commits on every terminal path.

        Args:
            section_id: Section with a free seat.

        Returns:
            PromotionResult describing the outcome.
        """
        try:
            result = await self._promote_locked(section_id)
        except Exception:
            await self.db.rollback()
            raise

        if result.status == PromotionStatus.PROMOTED and result.student_id is not None:
            user_id = await self._student_user_id(result.student_id)
            if user_id is not None:
                await self.emitter.notify_promoted(user_id, section_id)

        return result

    async def _promote_locked(self, section_id: int) -> PromotionResult:
        query = (
            select(CourseSection)
            .where(CourseSection.id == section_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        section = (await self.db.execute(query)).scalar_one_or_none()
        if section is None:
            await self.db.rollback()
            return PromotionResult(PromotionStatus.SECTION_NOT_FOUND, section_id)

        period = await AcademicPeriodService(self.db).current_period()
        if period is None or (period.semester_id, period.academic_year_id) != (
            section.semester_id,
            section.academic_year_id,
        ):
            await self.db.commit()
            logger.info("Refusing promotion in section %s outside the current term", section_id)
            return PromotionResult(PromotionStatus.TERM_CLOSED, section_id)

        stale = 0
        while True:
            if not section.has_free_seat:
                await self.db.commit()
                return PromotionResult(
                    PromotionStatus.SECTION_FULL, section_id, stale_entries_removed=stale
                )

            entry = await self._head(section_id)
            if entry is None:
                await self.db.commit()
                return PromotionResult(
                    PromotionStatus.EMPTY_QUEUE, section_id, stale_entries_removed=stale
                )

            existing = await self.ledger.get_enrollment(
                entry.student_id, section_id, section.semester_id
            )
            if existing is not None and existing.status != ENROLLMENT_STATUS_WITHDRAWN:
                logger.info(
                    "Dropping stale waitlist entry %s: student %s already enrolled in section %s",
                    entry.id,
                    entry.student_id,
                    section_id,
                )
                await self.db.delete(entry)
                await self.db.flush()
                stale += 1
                continue

            enrollment = await self.ledger.create_enrollment(
                entry.student_id,
                section,
                section.semester_id,
                section.academic_year_id,
            )
            if enrollment is None:
                await self.db.commit()
                return PromotionResult(
                    PromotionStatus.SECTION_FULL, section_id, stale_entries_removed=stale
                )

            student_id = entry.student_id
            await self.db.delete(entry)
            await self.db.flush()
            enrollment_id = enrollment.id
            await self.db.commit()

            logger.info(
                "Promoted student %s from waitlist of section %s", student_id, section_id
            )
            return PromotionResult(
                PromotionStatus.PROMOTED,
                section_id,
                student_id=student_id,
                enrollment_id=enrollment_id,
                stale_entries_removed=stale,
            )

    async def remove(self, entry_id: int, section_id: int) -> RemovalStatus:
        """Delete a waitlist entry of a section. Seat counts are untouched."""
        stmt = delete(WaitlistEntry).where(
            WaitlistEntry.id == entry_id,
            WaitlistEntry.course_section_id == section_id,
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        if result.rowcount == 0:
            return RemovalStatus.NOT_FOUND

        logger.info("Removed waitlist entry %s from section %s", entry_id, section_id)
        return RemovalStatus.REMOVED

    async def position(self, entry: WaitlistEntry) -> int:
        """1-based position of an entry in its section's queue."""
        query = select(func.count(WaitlistEntry.id)).where(
            WaitlistEntry.course_section_id == entry.course_section_id,
            or_(
                WaitlistEntry.requested_at < entry.requested_at,
                and_(
                    WaitlistEntry.requested_at == entry.requested_at,
                    WaitlistEntry.id <= entry.id,
                ),
            ),
        )
        result = await self.db.execute(query)
        return result.scalar() or 1

    async def get_entry(self, student_id: int, section_id: int) -> WaitlistEntry | None:
        query = select(WaitlistEntry).where(
            WaitlistEntry.student_id == student_id,
            WaitlistEntry.course_section_id == section_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_entries(self, section_id: int) -> list[WaitlistEntry]:
        """Entries of a section in queue order, with students loaded."""
        query = (
            select(WaitlistEntry)
            .where(WaitlistEntry.course_section_id == section_id)
            .options(selectinload(WaitlistEntry.student))
            .order_by(WaitlistEntry.requested_at, WaitlistEntry.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_section_view(
        self, section_id: int, instructor_id: int | None = None
    ) -> WaitlistSectionView | None:
        """Section meta plus queue size, even when the queue is empty.

        Args:
            section_id: Section to describe.
            instructor_id: When given, only a section taught by this
                instructor is returned.

        Returns:
            WaitlistSectionView, or None if the section does not exist or
            is not visible to the instructor.
        """
        query = (
            select(CourseSection)
            .where(CourseSection.id == section_id)
            .options(selectinload(CourseSection.course))
        )
        if instructor_id is not None:
            query = query.where(CourseSection.instructor_id == instructor_id)

        section = (await self.db.execute(query)).scalar_one_or_none()
        if section is None:
            return None

        count_query = select(func.count(WaitlistEntry.id)).where(
            WaitlistEntry.course_section_id == section_id
        )
        count = (await self.db.execute(count_query)).scalar() or 0
        return WaitlistSectionView(section=section, waitlist_count=count)

    async def sections_with_waitlists(
        self, instructor_id: int | None = None
    ) -> list[WaitlistSectionView]:
        """Sections that have at least one queued student.

        Args:
            instructor_id: Restrict to sections taught by this instructor;
                None lists every section.
        """
        counts = (
            select(
                WaitlistEntry.course_section_id.label("section_id"),
                func.count(WaitlistEntry.id).label("waitlist_count"),
            )
            .group_by(WaitlistEntry.course_section_id)
            .subquery()
        )
        query = (
            select(CourseSection, counts.c.waitlist_count)
            .join(counts, counts.c.section_id == CourseSection.id)
            .options(selectinload(CourseSection.course))
            .order_by(CourseSection.id)
        )
        if instructor_id is not None:
            query = query.where(CourseSection.instructor_id == instructor_id)

        result = await self.db.execute(query)
        return [
            WaitlistSectionView(section=section, waitlist_count=count)
            for section, count in result.all()
        ]

    async def _head(self, section_id: int) -> WaitlistEntry | None:
        query = (
            select(WaitlistEntry)
            .where(WaitlistEntry.course_section_id == section_id)
            .order_by(WaitlistEntry.requested_at, WaitlistEntry.id)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _student_user_id(self, student_id: int) -> str | None:
        result = await self.db.execute(
            select(Student.user_id).where(Student.id == student_id)
        )
        return result.scalar_one_or_none()
