# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic period domain.

Resolves the semester currently open for enrollment.
"""

from registrar.domains.academic_period.service import (
    AcademicPeriod,
    AcademicPeriodService,
    AcademicPeriodServiceError,
    SemesterNotFoundError,
)

__all__ = [
    "AcademicPeriod",
    "AcademicPeriodService",
    "AcademicPeriodServiceError",
    "SemesterNotFoundError",
]
