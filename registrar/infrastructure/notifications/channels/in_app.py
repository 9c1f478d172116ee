# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-app notification channel.

This channel creates rows in the notifications table, which the
application shows in the user's notification center.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from registrar.infrastructure.database.models import Notification
from registrar.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


class InAppChannel(BaseChannel):
    """In-app notification channel.

    Requires a database session to be set via set_session() before
    sending. The row is flushed, not committed; the caller owns the
    transaction.
    """

    def __init__(self) -> None:
        super().__init__()
        self._session: AsyncSession | None = None

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.IN_APP

    def set_session(self, session: AsyncSession) -> None:
        """Set the database session for this channel.

        Args:
            session: Async database session.
        """
        self._session = session

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Create an in-app notification record.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if self._session is None:
            return self.create_failure_result(
                "Database session not set. Call set_session() first."
            )

        try:
            notification = Notification(
                user_id=payload.recipient_id,
                title=payload.title,
                message=payload.message,
                type=payload.kind.value,
                is_read=False,
            )
            self._session.add(notification)
            await self._session.flush()

            self.logger.info(
                "Created in-app notification %s for user %s",
                notification.id,
                payload.recipient_id,
            )

            return self.create_success_result(
                message_id=str(notification.id),
                metadata={"notification_id": notification.id, **payload.data},
            )

        except Exception as e:
            self.logger.error(
                "Failed to create in-app notification for user %s: %s",
                payload.recipient_id,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(f"Database error: {str(e)}")
