# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist management API endpoints.

This module provides endpoints for instructors and admins:
- GET / - Sections with waiting students, or one section's ordered waitlist
- POST / - promote_next or remove_entry on a section's waitlist

Instructors only see and manage sections they teach; admins see all.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import DB, Staff
from registrar.domains.waitlist import (
    PromotionStatus,
    RemovalStatus,
    WaitlistSectionView,
    WaitlistService,
)
from registrar.models.waitlist import (
    WaitlistActionRequest,
    WaitlistActionResponse,
    WaitlistDetailResponse,
    WaitlistEntryResponse,
    WaitlistSectionsResponse,
    WaitlistSectionSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> WaitlistService:
    return WaitlistService(db=db)


def _to_summary(view: WaitlistSectionView) -> WaitlistSectionSummary:
    section = view.section
    return WaitlistSectionSummary(
        section_id=section.id,
        course_code=section.course.course_code,
        course_name=section.course.course_name,
        section_name=section.section_name,
        capacity=section.capacity,
        enrolled_count=section.enrolled_count,
        waitlist_count=view.waitlist_count,
    )


@router.get(
    "",
    response_model=WaitlistSectionsResponse | WaitlistDetailResponse,
    summary="List waitlists",
    description=(
        "Without section_id: sections with at least one waiting student. "
        "With section_id: the section and its waitlist in queue order."
    ),
)
async def get_waitlists(
    staff: Staff,
    db: DB,
    section_id: Annotated[int | None, Query(gt=0, description="Section to inspect")] = None,
) -> WaitlistSectionsResponse | WaitlistDetailResponse:
    """List waitlists visible to the caller.

    Args:
        staff: Instructor or admin context.
        db: Database session.
        section_id: Optional section to inspect.

    Returns:
        Section list or section detail.

    Raises:
        HTTPException: If the section does not exist or is not taught by
            the instructor.
    """
    service = _get_service(db)

    if section_id is None:
        views = await service.sections_with_waitlists(staff.instructor_id)
        return WaitlistSectionsResponse(
            sections=[_to_summary(view) for view in views],
            total=len(views),
        )

    view = await service.get_section_view(section_id, staff.instructor_id)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found",
        )

    entries = await service.list_entries(section_id)
    return WaitlistDetailResponse(
        section=_to_summary(view),
        entries=[
            WaitlistEntryResponse(
                id=entry.id,
                position=position,
                student_id=entry.student_id,
                student_number=entry.student.student_number,
                student_name=entry.student.full_name,
                requested_at=entry.requested_at,
            )
            for position, entry in enumerate(entries, start=1)
        ],
    )


@router.post(
    "",
    response_model=WaitlistActionResponse,
    summary="Modify a waitlist",
    description="Promote the next waiting student or remove a waitlist entry.",
)
async def modify_waitlist(
    data: WaitlistActionRequest,
    staff: Staff,
    db: DB,
) -> WaitlistActionResponse:
    """Apply a waitlist action.

    Promotion outcomes other than a promotion (empty queue, full section)
    are informational and answered with success=false.

    Args:
        data: Action request.
        staff: Instructor or admin context.
        db: Database session.

    Returns:
        WaitlistActionResponse.

    Raises:
        HTTPException: 404 for an unknown or foreign section or an unknown
            entry, 500 for unexpected failures.
    """
    service = _get_service(db)

    view = await service.get_section_view(data.section_id, staff.instructor_id)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found",
        )

    logger.info(
        "Waitlist action %s on section %s by %s",
        data.action,
        data.section_id,
        staff.user.id,
    )

    try:
        if data.action == "remove_entry":
            removal = await service.remove(data.waitlist_id, data.section_id)
            if removal == RemovalStatus.NOT_FOUND:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Waitlist entry not found",
                )
            return WaitlistActionResponse(
                success=True,
                status=removal.value,
                message="Removed from waitlist",
            )

        result = await service.promote_next(data.section_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Failed to modify waitlist of section %s: %s",
            data.section_id,
            str(e),
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to modify waitlists",
        )

    return WaitlistActionResponse(
        success=result.status == PromotionStatus.PROMOTED,
        status=result.status.value,
        message=result.message,
        student_id=result.student_id,
        enrollment_id=result.enrollment_id,
    )
