# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility domain package.

This package decides whether a student may take a seat in a section:
- Term and enrollment window rules
- Duplicate enrollment and level rules
- Course and program prerequisite checks
"""

from registrar.domains.eligibility.prerequisites import (
    FreeTextPrerequisiteCheck,
    ProgramPrerequisiteCheck,
    parse_prerequisite_codes,
)
from registrar.domains.eligibility.results import EligibilityResult, RejectionReason
from registrar.domains.eligibility.service import EligibilityChecker

__all__ = [
    "EligibilityChecker",
    "EligibilityResult",
    "FreeTextPrerequisiteCheck",
    "ProgramPrerequisiteCheck",
    "RejectionReason",
    "parse_prerequisite_codes",
]
