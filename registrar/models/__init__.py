# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the HTTP API."""

from registrar.models.academic_period import (
    AcademicPeriodResponse,
    CountAuditResponse,
    SectionCountDriftResponse,
    SetCurrentSemesterRequest,
)
from registrar.models.enrollment import (
    CurrentEnrollment,
    EnrollmentOverview,
    EnrollRequest,
    EnrollResponse,
    SectionOffering,
    StudentProfile,
)
from registrar.models.waitlist import (
    WaitlistActionRequest,
    WaitlistActionResponse,
    WaitlistDetailResponse,
    WaitlistEntryResponse,
    WaitlistSectionsResponse,
    WaitlistSectionSummary,
)

__all__ = [
    # Academic period
    "AcademicPeriodResponse",
    "CountAuditResponse",
    "SectionCountDriftResponse",
    "SetCurrentSemesterRequest",
    # Enrollment
    "CurrentEnrollment",
    "EnrollmentOverview",
    "EnrollRequest",
    "EnrollResponse",
    "SectionOffering",
    "StudentProfile",
    # Waitlist
    "WaitlistActionRequest",
    "WaitlistActionResponse",
    "WaitlistDetailResponse",
    "WaitlistEntryResponse",
    "WaitlistSectionsResponse",
    "WaitlistSectionSummary",
]
