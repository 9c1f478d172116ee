# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for the academic period endpoints."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class AcademicPeriodResponse(BaseModel):
    """The semester currently open for enrollment."""

    model_config = ConfigDict(from_attributes=True)

    semester_id: int
    semester_name: str
    academic_year_id: int
    year_name: str
    start_date: date | None = None
    end_date: date | None = None
    registration_deadline: date | None = None


class SetCurrentSemesterRequest(BaseModel):
    """Request to make a semester the current enrollment term."""

    semester_id: int = Field(..., gt=0)


class SectionCountDriftResponse(BaseModel):
    """A section whose cached seat counter disagrees with its enrollments."""

    model_config = ConfigDict(from_attributes=True)

    section_id: int
    enrolled_count: int
    active_count: int
    capacity: int


class CountAuditResponse(BaseModel):
    """Response for the seat counter audit."""

    sections: list[SectionCountDriftResponse]
    total: int
