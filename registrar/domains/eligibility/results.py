# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rejection reasons and eligibility results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RejectionReason(str, Enum):
    """Why an enrollment request was refused."""

    ENROLLMENT_CLOSED = "enrollment_closed"
    SECTION_NOT_FOUND = "section_not_found"
    TERM_MISMATCH = "term_mismatch"
    WINDOW_NOT_OPEN = "window_not_open"
    WINDOW_CLOSED = "window_closed"
    ALREADY_ENROLLED = "already_enrolled"
    LEVEL_MISMATCH = "level_mismatch"
    MISSING_PREREQUISITES = "missing_prerequisites"
    MISSING_PROGRAM_PREREQUISITES = "missing_program_prerequisites"


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of the eligibility rules for one request.

    Attributes:
        eligible: True when every rule passed.
        reason: First failing rule, None when eligible.
        message: User-facing message for the failure.
        missing: Course codes reported by a prerequisite failure.
    """

    eligible: bool
    reason: RejectionReason | None = None
    message: str | None = None
    missing: tuple[str, ...] = ()

    @classmethod
    def passed(cls) -> EligibilityResult:
        return cls(eligible=True)

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        message: str,
        missing: tuple[str, ...] | list[str] = (),
    ) -> EligibilityResult:
        return cls(eligible=False, reason=reason, message=message, missing=tuple(missing))
