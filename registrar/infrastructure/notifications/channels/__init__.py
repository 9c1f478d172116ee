# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

- InAppChannel: Creates notification records in the database

Usage:
    from registrar.infrastructure.notifications.channels import (
        InAppChannel,
        NotificationKind,
        NotificationPayload,
    )

    in_app = InAppChannel()
    in_app.set_session(session)
    result = await in_app.send(
        NotificationPayload(
            recipient_id="42",
            title="Enrollment confirmed",
            message="You are enrolled in CS201 - Section 7.",
            kind=NotificationKind.SUCCESS,
        )
    )
"""

from registrar.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationKind,
    NotificationPayload,
)
from registrar.infrastructure.notifications.channels.in_app import InAppChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationKind",
    "NotificationPayload",
    # Channels
    "InAppChannel",
]
