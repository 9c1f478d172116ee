# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    enroll: Student enrollment endpoints.
    waitlists: Instructor and admin waitlist management.
    terms: Current enrollment term and seat counter audit.
"""

from fastapi import APIRouter

from registrar.api.v1 import enroll, terms, waitlists

router = APIRouter(prefix="/api/v1")

router.include_router(enroll.router, prefix="/enroll", tags=["Enrollment"])
router.include_router(waitlists.router, prefix="/waitlists", tags=["Waitlists"])
router.include_router(terms.router, prefix="/terms", tags=["Terms"])

__all__ = ["router"]
