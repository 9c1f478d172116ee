# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist domain package.

This package manages FIFO waitlists for full sections:
- Idempotent enqueue
- Promotion of the queue head under a section lock
- Removal and queue positions
"""

from registrar.domains.waitlist.service import (
    EnqueueResult,
    PromotionResult,
    PromotionStatus,
    RemovalStatus,
    WaitlistSectionView,
    WaitlistService,
)

__all__ = [
    "EnqueueResult",
    "PromotionResult",
    "PromotionStatus",
    "RemovalStatus",
    "WaitlistSectionView",
    "WaitlistService",
]
