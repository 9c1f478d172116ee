# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic period service: which term is open for enrollment.

This module provides the AcademicPeriodService class for:
- Resolving the current enrollment period from the current semester flag
- Switching the current semester (admin operation)

The current semester is the only source of truth. Calendar dates never
select a term on their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.infrastructure.database.models import AcademicYear, Semester

logger = logging.getLogger(__name__)


class AcademicPeriodServiceError(Exception):
    """Base exception for academic period service errors."""

    pass


class SemesterNotFoundError(AcademicPeriodServiceError):
    """Raised when a semester does not exist."""

    pass


@dataclass(frozen=True)
class AcademicPeriod:
    """The (semester, academic year) pair open for enrollment.

    Attributes:
        semester_id: Current semester.
        semester_name: Display name of the semester.
        academic_year_id: Academic year owning the semester.
        year_name: Display name of the academic year.
        start_date: First day enrollment is accepted.
        end_date: Last day of the semester.
        registration_deadline: Semester-wide enrollment deadline.
    """

    semester_id: int
    semester_name: str
    academic_year_id: int
    year_name: str
    start_date: date | None
    end_date: date | None
    registration_deadline: date | None

    def deadline_for(self, section_deadline: date | None = None) -> date | None:
        """Last day enrollment is accepted.

        A section-level deadline overrides the semester deadline, which in
        turn falls back to the semester end date.
        """
        return section_deadline or self.registration_deadline or self.end_date

    @classmethod
    def from_models(cls, semester: Semester, year: AcademicYear) -> AcademicPeriod:
        return cls(
            semester_id=semester.id,
            semester_name=semester.semester_name,
            academic_year_id=year.id,
            year_name=year.year_name,
            start_date=semester.start_date,
            end_date=semester.end_date,
            registration_deadline=semester.registration_deadline,
        )


class AcademicPeriodService:
    """Resolves and switches the current enrollment period.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def current_period(self) -> AcademicPeriod | None:
        """Return the period of the semester flagged current.

        Returns:
            The current AcademicPeriod, or None when no semester is
            current. None means enrollment is closed.
        """
        query = (
            select(Semester, AcademicYear)
            .join(AcademicYear, Semester.academic_year_id == AcademicYear.id)
            .where(Semester.is_current == True)  # noqa: E712
            .order_by(Semester.id)
            .limit(1)
        )
        row = (await self.db.execute(query)).first()
        if row is None:
            return None

        semester, year = row
        return AcademicPeriod.from_models(semester, year)

    async def set_current_semester(self, semester_id: int) -> AcademicPeriod:
        """Make a semester (and its academic year) current.

        Every other semester and academic year loses its current flag in
        the same transaction, so at most one semester is ever current.

        Args:
            semester_id: Semester to open for enrollment.

        Returns:
            The new current AcademicPeriod.

        Raises:
            SemesterNotFoundError: If the semester does not exist.
        """
        semester = await self.db.get(Semester, semester_id)
        if semester is None:
            raise SemesterNotFoundError(f"Semester {semester_id} not found")

        year = await self.db.get(AcademicYear, semester.academic_year_id)
        if year is None:
            raise SemesterNotFoundError(
                f"Academic year for semester {semester_id} not found"
            )

        await self.db.execute(
            update(Semester)
            .where(Semester.is_current == True)  # noqa: E712
            .values(is_current=False)
        )
        await self.db.execute(
            update(AcademicYear)
            .where(AcademicYear.is_current == True)  # noqa: E712
            .values(is_current=False)
        )

        semester.is_current = True
        year.is_current = True
        await self.db.commit()

        logger.info(
            "Current semester set to %s (%s, %s)",
            semester.id,
            semester.semester_name,
            year.year_name,
        )

        return AcademicPeriod.from_models(semester, year)
