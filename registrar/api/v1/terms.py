# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment term API endpoints.

This module provides endpoints for the current enrollment term:
- GET /current - Current academic period (any authenticated user)
- PUT /current - Switch the current semester (admin)
- GET /count-audit - Sections whose seat counter drifted (admin)
"""

import logging

from fastapi import APIRouter, HTTPException, status

from registrar.api.dependencies import DB, AdminUser, AuthenticatedUser
from registrar.domains.academic_period import AcademicPeriodService, SemesterNotFoundError
from registrar.domains.enrollment import EnrollmentLedger
from registrar.models.academic_period import (
    AcademicPeriodResponse,
    CountAuditResponse,
    SectionCountDriftResponse,
    SetCurrentSemesterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/current",
    response_model=AcademicPeriodResponse | None,
    summary="Get current term",
    description="The semester currently open for enrollment, or null.",
)
async def get_current_term(
    current_user: AuthenticatedUser,
    db: DB,
) -> AcademicPeriodResponse | None:
    period = await AcademicPeriodService(db).current_period()
    if period is None:
        return None
    return AcademicPeriodResponse.model_validate(period)


@router.put(
    "/current",
    response_model=AcademicPeriodResponse,
    summary="Set current term",
    description="Make a semester current. Requires admin access.",
)
async def set_current_term(
    data: SetCurrentSemesterRequest,
    current_user: AdminUser,
    db: DB,
) -> AcademicPeriodResponse:
    """Switch the current semester.

    Args:
        data: Semester to make current.
        current_user: Authenticated admin.
        db: Database session.

    Returns:
        The new current period.

    Raises:
        HTTPException: If the semester does not exist.
    """
    logger.info("Setting current semester to %s by %s", data.semester_id, current_user.id)

    try:
        period = await AcademicPeriodService(db).set_current_semester(data.semester_id)
    except SemesterNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Semester not found",
        )
    return AcademicPeriodResponse.model_validate(period)


@router.get(
    "/count-audit",
    response_model=CountAuditResponse,
    summary="Audit seat counters",
    description="Sections whose enrolled_count differs from their active enrollments.",
)
async def audit_seat_counters(
    current_user: AdminUser,
    db: DB,
) -> CountAuditResponse:
    drifts = await EnrollmentLedger(db).audit_counts()
    return CountAuditResponse(
        sections=[SectionCountDriftResponse.model_validate(drift) for drift in drifts],
        total=len(drifts),
    )
