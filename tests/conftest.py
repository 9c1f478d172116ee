# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- An in-memory SQLite database with the full schema
- A CatalogBuilder for terms, courses, sections, students and queues
- A fixed "today" inside the open enrollment window
"""

import os

# Must be set before registrar modules read their settings
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TIMEZONE", "UTC")

from collections.abc import AsyncGenerator
from datetime import date, datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from registrar.infrastructure.database.connection import create_sessionmaker
from registrar.infrastructure.database.models import (
    ENROLLMENT_STATUS_COMPLETED,
    ENROLLMENT_STATUS_ENROLLED,
    AcademicYear,
    Base,
    Course,
    CoursePrerequisite,
    CourseSection,
    Department,
    Enrollment,
    Instructor,
    Level,
    Notification,
    Program,
    ProgramCourse,
    Semester,
    Student,
    WaitlistEntry,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Inside the default window built by CatalogBuilder.term()
TODAY = date(2025, 9, 10)
TERM_START = date(2025, 9, 1)
TERM_END = date(2025, 12, 20)
TERM_DEADLINE = date(2025, 9, 30)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (HTTP or migrations)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with every table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine):
    """Sessionmaker configured like the application's."""
    return create_sessionmaker(db_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def file_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine; each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registrar.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def file_session_factory(file_engine: AsyncEngine):
    """Sessionmaker for concurrent sessions on the file-backed database."""
    return create_sessionmaker(file_engine)


@pytest.fixture
def today() -> date:
    """A date inside the default enrollment window."""
    return TODAY


# =============================================================================
# Catalog Builder
# =============================================================================


class CatalogBuilder:
    """Creates and commits rows for a test scenario.

    Every method commits so the rows are visible to the code under test
    exactly as they would be in a running service.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj: Any) -> Any:
        self.db.add(obj)
        await self.db.commit()
        return obj

    async def term(
        self,
        is_current: bool = True,
        start_date: date | None = TERM_START,
        end_date: date | None = TERM_END,
        registration_deadline: date | None = TERM_DEADLINE,
        year: AcademicYear | None = None,
        name: str = "Fall",
    ) -> Semester:
        if year is None:
            n = self._next()
            year = await self._save(
                AcademicYear(
                    year_name=f"2025-{2026 + n}",
                    start_date=date(2025, 9, 1),
                    end_date=date(2026, 6, 30),
                    is_current=is_current,
                )
            )
        return await self._save(
            Semester(
                academic_year_id=year.id,
                semester_name=name,
                start_date=start_date,
                end_date=end_date,
                registration_deadline=registration_deadline,
                is_current=is_current,
            )
        )

    async def department(self, name: str = "Computer Science") -> Department:
        return await self._save(Department(dept_name=name))

    async def level(self, order: int = 100) -> Level:
        return await self._save(Level(level_name=f"Level {order}", level_order=order))

    async def program(self, department: Department | None = None) -> Program:
        return await self._save(
            Program(
                program_name=f"Program {self._next()}",
                department_id=department.id if department else None,
            )
        )

    async def course(
        self,
        code: str | None = None,
        department: Department | None = None,
        level: Level | None = None,
        prerequisites: str | None = None,
    ) -> Course:
        n = self._next()
        return await self._save(
            Course(
                course_code=code or f"CS{100 + n}",
                course_name=f"Course {n}",
                credits=3,
                department_id=department.id if department else None,
                level_id=level.id if level else None,
                prerequisites=prerequisites,
            )
        )

    async def program_prerequisite(
        self, program: Program, course: Course, prereq: Course
    ) -> None:
        """Put course in program (once) and make prereq required before it."""
        member = await self.db.execute(
            select(ProgramCourse.id).where(
                ProgramCourse.program_id == program.id,
                ProgramCourse.course_id == course.id,
            )
        )
        if member.first() is None:
            self.db.add(ProgramCourse(program_id=program.id, course_id=course.id))
        self.db.add(CoursePrerequisite(course_id=course.id, prereq_course_id=prereq.id))
        await self.db.commit()

    async def instructor(self, user_id: str | None = None) -> Instructor:
        n = self._next()
        return await self._save(
            Instructor(
                user_id=user_id or f"instructor-{n}",
                first_name="Ada",
                last_name=f"Lovelace{n}",
            )
        )

    async def student(
        self,
        user_id: str | None = None,
        department: Department | None = None,
        level: Level | None = None,
        program: Program | None = None,
    ) -> Student:
        n = self._next()
        return await self._save(
            Student(
                user_id=user_id or f"student-{n}",
                student_number=f"S{n:05d}",
                first_name="Grace",
                last_name=f"Hopper{n}",
                department_id=department.id if department else None,
                current_level_id=level.id if level else None,
                program_id=program.id if program else None,
            )
        )

    async def section(
        self,
        course: Course,
        semester: Semester,
        instructor: Instructor | None = None,
        capacity: int = 2,
        registration_deadline: date | None = None,
    ) -> CourseSection:
        if instructor is None:
            instructor = await self.instructor()
        return await self._save(
            CourseSection(
                course_id=course.id,
                instructor_id=instructor.id,
                semester_id=semester.id,
                academic_year_id=semester.academic_year_id,
                section_name=f"S{self._next()}",
                capacity=capacity,
                enrolled_count=0,
                registration_deadline=registration_deadline,
            )
        )

    async def enroll(
        self,
        student: Student,
        section: CourseSection,
        status: str = ENROLLMENT_STATUS_ENROLLED,
        final_grade: str | None = None,
    ) -> Enrollment:
        """Record an enrollment, keeping the seat counter consistent."""
        enrollment = Enrollment(
            student_id=student.id,
            course_section_id=section.id,
            semester_id=section.semester_id,
            academic_year_id=section.academic_year_id,
            status=status,
            final_grade=final_grade,
        )
        self.db.add(enrollment)
        if status == ENROLLMENT_STATUS_ENROLLED:
            await self.db.refresh(section, attribute_names=["enrolled_count"])
            section.enrolled_count += 1
        await self.db.commit()
        return enrollment

    async def completed(self, student: Student, course: Course, grade: str = "A") -> None:
        """Give the student a graded enrollment in a past-term section of a course."""
        past = await self.term(is_current=False, name=f"Past {self._next()}")
        section = await self.section(course, past, capacity=5)
        await self.enroll(student, section, status=ENROLLMENT_STATUS_COMPLETED, final_grade=grade)

    async def waitlist(
        self,
        student: Student,
        section: CourseSection,
        requested_at: datetime | None = None,
    ) -> WaitlistEntry:
        return await self._save(
            WaitlistEntry(
                student_id=student.id,
                course_section_id=section.id,
                requested_at=requested_at or datetime(2025, 9, 5, 9, 0, tzinfo=timezone.utc),
            )
        )

    # -- Assertions helpers ---------------------------------------------------

    async def enrolled_count(self, section_id: int) -> int:
        result = await self.db.execute(
            select(CourseSection.enrolled_count).where(CourseSection.id == section_id)
        )
        return result.scalar_one()

    async def count(self, model: type, *criteria: Any) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*criteria))
        return result.scalar_one()

    async def notifications_for(self, user_id: str) -> list[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.id)
        )
        return list(result.scalars().all())


@pytest.fixture
def catalog(db_session: AsyncSession) -> CatalogBuilder:
    """Builder bound to the test session."""
    return CatalogBuilder(db_session)


@pytest_asyncio.fixture
async def campus(catalog: CatalogBuilder) -> dict[str, Any]:
    """A current term with one department, level, course and open section.

    The section has two seats, both free. The student matches the
    course's department and level and has no prerequisites to satisfy.
    """
    semester = await catalog.term()
    department = await catalog.department()
    level = await catalog.level(100)
    course = await catalog.course("CS201", department=department, level=level)
    instructor = await catalog.instructor("instructor-main")
    section = await catalog.section(course, semester, instructor=instructor, capacity=2)
    student = await catalog.student("student-main", department=department, level=level)
    return {
        "semester": semester,
        "department": department,
        "level": level,
        "course": course,
        "instructor": instructor,
        "section": section,
        "student": student,
    }


@pytest_asyncio.fixture
async def file_catalog(file_session_factory) -> AsyncGenerator[CatalogBuilder, None]:
    """Builder bound to a session on the file-backed database."""
    async with file_session_factory() as session:
        yield CatalogBuilder(session)
