# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the academic period service."""

from datetime import date

import pytest
from sqlalchemy import select

from registrar.domains.academic_period import (
    AcademicPeriod,
    AcademicPeriodService,
    SemesterNotFoundError,
)
from registrar.infrastructure.database.models import AcademicYear, Semester


def _period(**overrides) -> AcademicPeriod:
    values = {
        "semester_id": 1,
        "semester_name": "Fall",
        "academic_year_id": 1,
        "year_name": "2025-2026",
        "start_date": date(2025, 9, 1),
        "end_date": date(2025, 12, 20),
        "registration_deadline": date(2025, 9, 30),
    }
    values.update(overrides)
    return AcademicPeriod(**values)


class TestAcademicPeriodDeadline:
    """Tests for the effective enrollment deadline."""

    def test_section_deadline_wins(self) -> None:
        """Test a section-level deadline overrides the semester's."""
        period = _period()

        assert period.deadline_for(date(2025, 9, 15)) == date(2025, 9, 15)

    def test_falls_back_to_semester_deadline(self) -> None:
        """Test the semester deadline applies without a section deadline."""
        period = _period()

        assert period.deadline_for(None) == date(2025, 9, 30)

    def test_falls_back_to_end_date(self) -> None:
        """Test the semester end date applies when no deadline is set."""
        period = _period(registration_deadline=None)

        assert period.deadline_for() == date(2025, 12, 20)

    def test_no_bound_at_all(self) -> None:
        """Test no deadline and no end date means no upper bound."""
        period = _period(registration_deadline=None, end_date=None)

        assert period.deadline_for() is None


class TestCurrentPeriod:
    """Tests for resolving the current period."""

    @pytest.mark.asyncio
    async def test_no_current_semester(self, db_session, catalog) -> None:
        """Test None is returned when no semester is current."""
        await catalog.term(is_current=False)

        service = AcademicPeriodService(db_session)

        assert await service.current_period() is None

    @pytest.mark.asyncio
    async def test_returns_flagged_semester(self, db_session, catalog) -> None:
        """Test the semester flagged current is returned with its year."""
        await catalog.term(is_current=False, name="Spring")
        current = await catalog.term(name="Fall")

        period = await AcademicPeriodService(db_session).current_period()

        assert period is not None
        assert period.semester_id == current.id
        assert period.academic_year_id == current.academic_year_id
        assert period.semester_name == "Fall"
        assert period.registration_deadline == date(2025, 9, 30)


class TestSetCurrentSemester:
    """Tests for switching the current semester."""

    @pytest.mark.asyncio
    async def test_switches_flags(self, db_session, catalog) -> None:
        """Test exactly one semester and one year stay current."""
        old = await catalog.term(name="Fall")
        new = await catalog.term(is_current=False, name="Spring")

        period = await AcademicPeriodService(db_session).set_current_semester(new.id)

        assert period.semester_id == new.id

        current_semesters = (
            await db_session.execute(select(Semester.id).where(Semester.is_current == True))  # noqa: E712
        ).scalars().all()
        current_years = (
            await db_session.execute(
                select(AcademicYear.id).where(AcademicYear.is_current == True)  # noqa: E712
            )
        ).scalars().all()

        assert list(current_semesters) == [new.id]
        assert list(current_years) == [new.academic_year_id]
        assert old.id not in current_semesters

    @pytest.mark.asyncio
    async def test_unknown_semester(self, db_session) -> None:
        """Test an unknown semester raises SemesterNotFoundError."""
        service = AcademicPeriodService(db_session)

        with pytest.raises(SemesterNotFoundError):
            await service.set_current_semester(999)
