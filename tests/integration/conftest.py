# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for HTTP integration tests.

The application is driven through httpx's ASGI transport. Its database
dependency is overridden to hand out sessions from the in-memory test
engine, committing on success like the production dependency.
"""

from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from registrar.api.app import create_app
from registrar.api.dependencies import get_db
from registrar.utils.datetime import local_today


@pytest.fixture
def app(session_factory) -> FastAPI:
    """Create the application bound to the test database."""
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def identity(user_id: str, role: str) -> dict[str, str]:
    """Headers forwarded by the authentication gateway."""
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def student_headers() -> dict[str, str]:
    return identity("student-main", "student")


@pytest.fixture
def instructor_headers() -> dict[str, str]:
    return identity("instructor-main", "instructor")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return identity("admin-1", "admin")


@pytest_asyncio.fixture
async def live_campus(catalog) -> dict:
    """Like campus, but with the enrollment window open around the real date.

    The HTTP layer evaluates windows against today's date in the configured
    timezone, so the fixed dates used by unit tests do not apply here.
    """
    now = local_today("UTC")
    semester = await catalog.term(
        start_date=now - timedelta(days=10),
        end_date=now + timedelta(days=90),
        registration_deadline=now + timedelta(days=10),
    )
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
