# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity arbiter: decides whether a section has a free seat.

The decision that counts is made by a single guarded UPDATE:

    UPDATE course_sections
       SET enrolled_count = enrolled_count + 1
     WHERE id = :id AND enrolled_count < capacity

Two requests racing for the last seat both run it; the database lets only
one of them match the row. A refused reservation is not an error, the
caller routes the student to the waitlist instead.
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.enrollment.results import SeatDecision
from registrar.infrastructure.database.models import CourseSection

logger = logging.getLogger(__name__)


class CapacityArbiter:
    """Seat availability checks for course sections.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @staticmethod
    def try_reserve_seat(section: CourseSection) -> SeatDecision:
        """Read-only decision from the section as currently loaded.

        Advisory only; the guarded increment is authoritative.
        """
        if section.enrolled_count < section.capacity:
            return SeatDecision.RESERVED
        return SeatDecision.FULL

    async def reserve_seat_if_available(self, section_id: int) -> bool:
        """Atomically take one seat in a section.

        Runs inside the caller's transaction; a rollback releases the seat.

        Args:
            section_id: Section to reserve a seat in.

        Returns:
            True if the counter was incremented, False if the section was
            full (or does not exist).
        """
        stmt = (
            update(CourseSection)
            .where(
                CourseSection.id == section_id,
                CourseSection.enrolled_count < CourseSection.capacity,
            )
            .values(enrolled_count=CourseSection.enrolled_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        reserved = result.rowcount == 1
        if not reserved:
            logger.info("No seat available in section %s", section_id)
        return reserved
