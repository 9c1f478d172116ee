# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student enrollment API endpoints.

This module provides endpoints for students:
- GET / - Profile, current term, offered sections and current enrollments
- POST / - Enroll in a section (or join its waitlist when full)

Requires the student role.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from registrar.api.dependencies import DB, StudentUser
from registrar.api.middleware.rate_limit import limiter
from registrar.core.config import get_settings
from registrar.domains.eligibility import RejectionReason
from registrar.domains.enrollment import EnrollmentOutcome
from registrar.domains.enrollment.service import EnrollmentService
from registrar.infrastructure.database.models import Department, Level
from registrar.models.academic_period import AcademicPeriodResponse
from registrar.models.enrollment import (
    CurrentEnrollment,
    EnrollmentOverview,
    EnrollRequest,
    EnrollResponse,
    SectionOffering,
    StudentProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter()

settings = get_settings()


def _status_code(outcome: EnrollmentOutcome) -> int:
    if outcome.is_success:
        return status.HTTP_200_OK
    if outcome.reason == RejectionReason.SECTION_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def _to_response(outcome: EnrollmentOutcome) -> EnrollResponse:
    return EnrollResponse(
        success=outcome.is_success,
        outcome=outcome.status.value,
        message=outcome.message,
        reason=outcome.reason.value if outcome.reason else None,
        waitlist_position=outcome.waitlist_position,
    )


@router.get(
    "",
    response_model=EnrollmentOverview,
    summary="Enrollment overview",
    description="Current term, offered sections and the student's enrollments.",
)
async def get_enrollment_overview(
    student: StudentUser,
    db: DB,
) -> EnrollmentOverview:
    """Build the enrollment page data for the requesting student.

    Args:
        student: Requesting student profile.
        db: Database session.

    Returns:
        EnrollmentOverview. Sections and enrollments are empty when no
        term is current.
    """
    service = EnrollmentService(db)
    period = await service.periods.current_period()

    department = await db.get(Department, student.department_id) if student.department_id else None
    level = await db.get(Level, student.current_level_id) if student.current_level_id else None

    profile = StudentProfile(
        id=student.id,
        student_number=student.student_number,
        full_name=student.full_name,
        department_id=student.department_id,
        department_name=department.dept_name if department else None,
        level_name=level.level_name if level else None,
        program_id=student.program_id,
    )

    if period is None:
        return EnrollmentOverview(student=profile, current_period=None, sections=[], enrollments=[])

    sections = await service.offered_sections(student, period)
    enrollments = await service.current_enrollments(student, period)

    return EnrollmentOverview(
        student=profile,
        current_period=AcademicPeriodResponse.model_validate(period),
        sections=[
            SectionOffering(
                section_id=section.id,
                course_id=section.course_id,
                course_code=section.course.course_code,
                course_name=section.course.course_name,
                credits=section.course.credits,
                section_name=section.section_name,
                schedule=section.schedule,
                room=section.room,
                capacity=section.capacity,
                enrolled_count=section.enrolled_count,
                available_seats=max(section.capacity - section.enrolled_count, 0),
                instructor_name=section.instructor.full_name if section.instructor else None,
            )
            for section in sections
        ],
        enrollments=[
            CurrentEnrollment(
                enrollment_id=enrollment.id,
                section_id=enrollment.course_section_id,
                course_code=enrollment.section.course.course_code,
                course_name=enrollment.section.course.course_name,
                section_name=enrollment.section.section_name,
                status=enrollment.status,
                enrollment_date=enrollment.enrollment_date,
            )
            for enrollment in enrollments
        ],
    )


@router.post(
    "",
    response_model=EnrollResponse,
    summary="Enroll in a section",
    description=(
        "Enroll the student in a section of the current term. A full section "
        "places the student on its waitlist instead."
    ),
    responses={
        400: {"model": EnrollResponse, "description": "Request rejected"},
        404: {"model": EnrollResponse, "description": "Section not found"},
    },
)
@limiter.limit(settings.rate_limit.enroll_limit)
async def enroll(
    request: Request,
    data: EnrollRequest,
    student: StudentUser,
    db: DB,
) -> JSONResponse:
    """Enroll the requesting student.

    Args:
        request: HTTP request (used by the rate limiter).
        data: Enrollment request.
        student: Requesting student profile.
        db: Database session.

    Returns:
        200 for enrolled/waitlisted outcomes, 400 for rejections, 404 for
        an unknown section, 500 for unexpected failures.
    """
    service = EnrollmentService(db)
    student_id = student.id

    try:
        outcome = await service.enroll(student, data.section_id)
    except Exception as e:
        logger.error(
            "Failed to enroll student %s in section %s: %s",
            student_id,
            data.section_id,
            str(e),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Failed to enroll"},
        )

    return JSONResponse(
        status_code=_status_code(outcome),
        content=_to_response(outcome).model_dump(),
    )
