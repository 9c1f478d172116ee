# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification infrastructure.

The NotificationEmitter turns enrollment events into in-app notifications.
"""

from registrar.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    InAppChannel,
    NotificationKind,
    NotificationPayload,
)
from registrar.infrastructure.notifications.service import NotificationEmitter

__all__ = [
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "InAppChannel",
    "NotificationEmitter",
    "NotificationKind",
    "NotificationPayload",
]
