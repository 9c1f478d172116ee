# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Typed outcomes of enrollment operations.

Business outcomes (including rejections) are returned as values, never
raised. Outcomes hold plain ids so they stay valid after the session that
produced them has committed or rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from registrar.domains.eligibility.results import RejectionReason

MSG_ENROLLED = "Enrolled successfully."
MSG_WAITLISTED = "Section is full. You have been added to the waitlist."
MSG_ALREADY_WAITLISTED = "Section is full. You are already on the waitlist for this section."
MSG_ENROLLMENT_CLOSED = "Enrollment is currently closed."
MSG_SECTION_NOT_FOUND = "Selected section was not found."


class OutcomeStatus(str, Enum):
    """Terminal status of an enroll request."""

    ENROLLED = "enrolled"
    WAITLISTED = "waitlisted"
    ALREADY_WAITLISTED = "already_waitlisted"
    REJECTED = "rejected"


class SeatDecision(str, Enum):
    """Capacity decision for a section."""

    RESERVED = "reserved"
    FULL = "full"


@dataclass(frozen=True)
class EnrollmentOutcome:
    """Result of EnrollmentService.enroll.

    Attributes:
        status: Terminal status.
        message: User-facing message.
        section_id: Requested section.
        reason: Rejection reason, set only for REJECTED.
        missing_prerequisites: Course codes reported by a prerequisite rejection.
        enrollment_id: Created enrollment, set only for ENROLLED.
        waitlist_entry_id: Queue entry, set for WAITLISTED and ALREADY_WAITLISTED.
        waitlist_position: 1-based queue position of that entry.
    """

    status: OutcomeStatus
    message: str
    section_id: int
    reason: RejectionReason | None = None
    missing_prerequisites: tuple[str, ...] = ()
    enrollment_id: int | None = None
    waitlist_entry_id: int | None = None
    waitlist_position: int | None = None

    @property
    def is_success(self) -> bool:
        return self.status != OutcomeStatus.REJECTED

    @classmethod
    def enrolled(cls, section_id: int, enrollment_id: int) -> EnrollmentOutcome:
        return cls(
            status=OutcomeStatus.ENROLLED,
            message=MSG_ENROLLED,
            section_id=section_id,
            enrollment_id=enrollment_id,
        )

    @classmethod
    def waitlisted(
        cls, section_id: int, entry_id: int, position: int, created: bool
    ) -> EnrollmentOutcome:
        return cls(
            status=OutcomeStatus.WAITLISTED if created else OutcomeStatus.ALREADY_WAITLISTED,
            message=MSG_WAITLISTED if created else MSG_ALREADY_WAITLISTED,
            section_id=section_id,
            waitlist_entry_id=entry_id,
            waitlist_position=position,
        )

    @classmethod
    def rejected(
        cls,
        section_id: int,
        reason: RejectionReason,
        message: str,
        missing: tuple[str, ...] = (),
    ) -> EnrollmentOutcome:
        return cls(
            status=OutcomeStatus.REJECTED,
            message=message,
            section_id=section_id,
            reason=reason,
            missing_prerequisites=missing,
        )


@dataclass(frozen=True)
class SectionCountDrift:
    """A section whose cached enrolled_count differs from its active enrollments."""

    section_id: int
    enrolled_count: int
    active_count: int
    capacity: int
