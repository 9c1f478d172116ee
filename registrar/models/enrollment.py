# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for student enrollment."""

from datetime import datetime

from pydantic import BaseModel, Field

from registrar.models.academic_period import AcademicPeriodResponse


class EnrollRequest(BaseModel):
    """Request to enroll in a course section."""

    section_id: int = Field(..., gt=0, description="Course section to enroll in")


class EnrollResponse(BaseModel):
    """Outcome of an enrollment request."""

    success: bool
    outcome: str  # enrolled, waitlisted, already_waitlisted, rejected
    message: str
    reason: str | None = None
    waitlist_position: int | None = None


class StudentProfile(BaseModel):
    """Profile summary of the requesting student."""

    id: int
    student_number: str
    full_name: str
    department_id: int | None = None
    department_name: str | None = None
    level_name: str | None = None
    program_id: int | None = None


class SectionOffering(BaseModel):
    """A section offered to the student in the current term."""

    section_id: int
    course_id: int
    course_code: str
    course_name: str
    credits: int
    section_name: str
    schedule: str | None = None
    room: str | None = None
    capacity: int
    enrolled_count: int
    available_seats: int
    instructor_name: str | None = None


class CurrentEnrollment(BaseModel):
    """An enrollment of the student in the current term."""

    enrollment_id: int
    section_id: int
    course_code: str
    course_name: str
    section_name: str
    status: str
    enrollment_date: datetime


class EnrollmentOverview(BaseModel):
    """Everything the enrollment page needs for one student."""

    student: StudentProfile
    current_period: AcademicPeriodResponse | None = None
    sections: list[SectionOffering]
    enrollments: list[CurrentEnrollment]
