# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification emitter for enrollment and waitlist events.

Notifications are best-effort. The emitter runs after the enrollment or
waitlist change has been committed, writes the notification in its own
transaction, and never raises: a failure is logged and returned as a
failed ChannelResult, and the already committed state is left untouched.

Example:
    emitter = NotificationEmitter(db)
    await emitter.notify_enrolled(student.user_id, "CS201", section.id)
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.infrastructure.notifications.channels import (
    ChannelResult,
    InAppChannel,
    NotificationKind,
    NotificationPayload,
)

logger = logging.getLogger(__name__)

PROMOTION_TITLE = "Waitlist promotion"
PROMOTION_MESSAGE = "A seat opened and you have been auto-enrolled from the waitlist."


class NotificationEmitter:
    """Builds and stores the notification for each enrollment event.

    Attributes:
        channel: Channel used for delivery (in-app by default).
    """

    def __init__(self, db: AsyncSession, channel: InAppChannel | None = None) -> None:
        self.db = db
        self.channel = channel or InAppChannel()
        self.channel.set_session(db)

    async def emit(self, payload: NotificationPayload) -> ChannelResult:
        """Send a payload and commit it.

        Args:
            payload: Notification to deliver.

        Returns:
            ChannelResult describing the delivery. Never raises for
            delivery or storage failures.
        """
        result = await self.channel.send(payload)
        if not result.is_success:
            logger.warning(
                "Notification '%s' for user %s not delivered: %s",
                payload.title,
                payload.recipient_id,
                result.error_message,
            )
            await self._safe_rollback()
            return result

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to commit notification for user %s: %s",
                payload.recipient_id,
                str(e),
                exc_info=True,
            )
            await self._safe_rollback()
            return self.channel.create_failure_result(f"Database error: {str(e)}")

        return result

    async def notify_enrolled(
        self, user_id: str, course_code: str, section_id: int
    ) -> ChannelResult:
        return await self.emit(
            NotificationPayload(
                recipient_id=user_id,
                title="Enrollment confirmed",
                message=f"You are enrolled in {course_code} - Section {section_id}.",
                kind=NotificationKind.SUCCESS,
                data={"section_id": section_id},
            )
        )

    async def notify_waitlisted(
        self, user_id: str, course_code: str, section_id: int
    ) -> ChannelResult:
        return await self.emit(
            NotificationPayload(
                recipient_id=user_id,
                title="Added to waitlist",
                message=(
                    f"You have been added to the waitlist for "
                    f"{course_code} - Section {section_id}."
                ),
                kind=NotificationKind.WARNING,
                data={"section_id": section_id},
            )
        )

    async def notify_already_waitlisted(
        self, user_id: str, course_code: str, section_id: int
    ) -> ChannelResult:
        return await self.emit(
            NotificationPayload(
                recipient_id=user_id,
                title="Already on waitlist",
                message=(
                    f"You are already on the waitlist for "
                    f"{course_code} - Section {section_id}."
                ),
                kind=NotificationKind.INFO,
                data={"section_id": section_id},
            )
        )

    async def notify_rejected(
        self, user_id: str, reason: str, message: str
    ) -> ChannelResult:
        return await self.emit(
            NotificationPayload(
                recipient_id=user_id,
                title="Enrollment request declined",
                message=message,
                kind=NotificationKind.ERROR,
                data={"reason": reason},
            )
        )

    async def notify_promoted(self, user_id: str, section_id: int) -> ChannelResult:
        return await self.emit(
            NotificationPayload(
                recipient_id=user_id,
                title=PROMOTION_TITLE,
                message=PROMOTION_MESSAGE,
                kind=NotificationKind.SUCCESS,
                data={"section_id": section_id},
            )
        )

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after notification failure also failed", exc_info=True)
