# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

- IdentityMiddleware: Reads the forwarded user identity.
- limiter: slowapi rate limiter shared by the routers.
"""

from registrar.api.middleware.auth import CurrentUser, IdentityMiddleware, get_current_user
from registrar.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "CurrentUser",
    "IdentityMiddleware",
    "get_current_user",
    "limiter",
    "rate_limit_exceeded_handler",
]
