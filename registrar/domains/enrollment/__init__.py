# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package holds the seat-taking primitives:
- CapacityArbiter: guarded seat reservation
- EnrollmentLedger: the only writer of enrollments and seat counters
- EnrollmentOutcome and related result types

The enroll operation itself lives in registrar.domains.enrollment.service,
which also depends on the waitlist domain.
"""

from registrar.domains.enrollment.capacity import CapacityArbiter
from registrar.domains.enrollment.ledger import (
    DuplicateEnrollmentError,
    EnrollmentLedger,
    EnrollmentLedgerError,
)
from registrar.domains.enrollment.results import (
    EnrollmentOutcome,
    OutcomeStatus,
    SeatDecision,
    SectionCountDrift,
)

__all__ = [
    "CapacityArbiter",
    "DuplicateEnrollmentError",
    "EnrollmentLedger",
    "EnrollmentLedgerError",
    "EnrollmentOutcome",
    "OutcomeStatus",
    "SeatDecision",
    "SectionCountDrift",
]
