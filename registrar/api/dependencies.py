# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Dependencies are used to:
- Get database sessions
- Get the forwarded user and enforce roles
- Load the student or instructor profile behind the user

Example:
    @router.get("/enroll")
    async def overview(
        student: Student = Depends(require_student),
        db: AsyncSession = Depends(get_db),
    ):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.middleware.auth import CurrentUser, get_current_user
from registrar.infrastructure.database import get_session
from registrar.infrastructure.database.models import Instructor, Student

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession committed or rolled back when the request ends.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Identity Dependencies
# =========================================================================


def require_user(request: Request) -> CurrentUser:
    """Require a forwarded user identity.

    Raises:
        HTTPException: If no identity was forwarded.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require an admin user.

    Raises:
        HTTPException: If not authenticated or not admin.
    """
    user = require_user(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


async def require_student(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Student:
    """Require a student user and load their profile.

    Args:
        request: HTTP request.
        db: Database session.

    Returns:
        The Student profile of the requesting user.

    Raises:
        HTTPException: 401 without identity, 403 for non-students,
            404 when the profile does not exist.
    """
    user = require_user(request)
    if not user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )

    result = await db.execute(select(Student).where(Student.user_id == user.id))
    student = result.scalar_one_or_none()
    if student is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student profile not found",
        )
    return student


@dataclass
class StaffContext:
    """An instructor or admin managing waitlists.

    Attributes:
        user: Forwarded identity.
        instructor_id: Instructor profile id; None for admins, who see
            every section.
    """

    user: CurrentUser
    instructor_id: int | None


async def require_staff(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> StaffContext:
    """Require an instructor or admin user.

    Raises:
        HTTPException: 401 without identity, 403 for other roles, 404 when
            an instructor has no instructor profile.
    """
    user = require_user(request)
    if not user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor or admin access required",
        )

    if user.is_admin:
        return StaffContext(user=user, instructor_id=None)

    result = await db.execute(select(Instructor.id).where(Instructor.user_id == user.id))
    instructor_id = result.scalar_one_or_none()
    if instructor_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Instructor not found",
        )
    return StaffContext(user=user, instructor_id=instructor_id)


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_user)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
StudentUser = Annotated[Student, Depends(require_student)]
Staff = Annotated[StaffContext, Depends(require_staff)]
