# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity middleware.

Authentication happens upstream (gateway or session layer). It forwards the
authenticated user through two trusted headers, whose names come from
AuthSettings. This middleware turns them into request.state.user and binds
them to the logging context.

Example:
    POST /api/v1/enroll
    X-User-Id: 42
    X-User-Role: student
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from registrar.core.config import get_settings
from registrar.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"

VALID_ROLES = frozenset({ROLE_STUDENT, ROLE_INSTRUCTOR, ROLE_ADMIN})


class CurrentUser:
    """Authenticated user forwarded by the upstream auth layer.

    Attributes:
        id: User identifier (matches students.user_id / instructors.user_id).
        role: One of student, instructor, admin.
    """

    def __init__(self, user_id: str, role: str) -> None:
        self.id = user_id
        self.role = role

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @property
    def is_instructor(self) -> bool:
        return self.role == ROLE_INSTRUCTOR

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_staff(self) -> bool:
        """Instructors and admins may manage waitlists."""
        return self.is_instructor or self.is_admin

    def __repr__(self) -> str:
        return f"<CurrentUser {self.id} role={self.role}>"


class IdentityMiddleware(BaseHTTPMiddleware):
    """Populates request.state.user from the identity headers.

    Requests without headers, or with an unknown role, continue with
    request.state.user = None; endpoints decide whether that is allowed.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        settings = get_settings()
        self._user_id_header = settings.auth.user_id_header
        self._role_header = settings.auth.role_header

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request.state.user = None
        clear_context()
        bind_context(method=request.method, path=request.url.path)

        user_id = request.headers.get(self._user_id_header)
        role = (request.headers.get(self._role_header) or "").strip().lower()

        if user_id and role in VALID_ROLES:
            request.state.user = CurrentUser(user_id.strip(), role)
            bind_context(user_id=user_id.strip(), role=role)
            logger.debug("Request identity: %s (%s)", user_id, role)
        elif user_id:
            logger.debug("Ignoring identity with unknown role: %s", role)

        return await call_next(request)


def get_current_user(request: Request) -> CurrentUser | None:
    """Get current user from request state.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser or None if no identity was forwarded.
    """
    return getattr(request.state, "user", None)
