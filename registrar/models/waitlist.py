# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for waitlist management."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class WaitlistActionRequest(BaseModel):
    """Instructor or admin action on a section's waitlist."""

    action: Literal["promote_next", "remove_entry"]
    section_id: int = Field(..., gt=0)
    waitlist_id: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _require_waitlist_id_for_removal(self) -> "WaitlistActionRequest":
        if self.action == "remove_entry" and self.waitlist_id is None:
            raise ValueError("waitlist_id is required")
        return self


class WaitlistEntryResponse(BaseModel):
    """A queued student, with their 1-based position."""

    id: int
    position: int
    student_id: int
    student_number: str
    student_name: str
    requested_at: datetime


class WaitlistSectionSummary(BaseModel):
    """A section together with the size of its waitlist."""

    section_id: int
    course_code: str
    course_name: str
    section_name: str
    capacity: int
    enrolled_count: int
    waitlist_count: int


class WaitlistSectionsResponse(BaseModel):
    """Sections that currently have students waiting."""

    sections: list[WaitlistSectionSummary]
    total: int


class WaitlistDetailResponse(BaseModel):
    """A single section and its ordered waitlist."""

    section: WaitlistSectionSummary
    entries: list[WaitlistEntryResponse]


class WaitlistActionResponse(BaseModel):
    """Result of a waitlist action."""

    success: bool
    status: str
    message: str
    student_id: int | None = None
    enrollment_id: int | None = None
