# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the registrar service.

All timestamps are stored in UTC and all Python datetimes are
timezone-aware. Calendar dates (term bounds, registration deadlines) are
compared against "today" in the institution's configured timezone.

Usage:
    from registrar.utils.datetime import utc_now

    # For SQLAlchemy model defaults
    requested_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def local_today(tz_name: str = "UTC") -> date:
    """Get today's calendar date in the given timezone.

    Args:
        tz_name: IANA timezone name.

    Returns:
        Current date in that timezone.
    """
    return utc_now().astimezone(ZoneInfo(tz_name)).date()
