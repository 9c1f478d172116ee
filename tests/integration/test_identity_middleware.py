# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for identity propagation and client keys."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from registrar.api.middleware import IdentityMiddleware, get_current_user
from registrar.api.middleware.auth import CurrentUser
from registrar.api.middleware.rate_limit import get_client_identifier


@pytest.fixture
def echo_app() -> FastAPI:
    """Minimal app echoing the resolved identity."""
    app = FastAPI()
    app.add_middleware(IdentityMiddleware)

    @app.get("/whoami")
    async def whoami(request: Request) -> dict:
        user = get_current_user(request)
        if user is None:
            return {"user": None}
        return {"user": user.id, "role": user.role, "staff": user.is_staff}

    return app


async def _whoami(app: FastAPI, headers: dict[str, str]) -> dict:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/whoami", headers=headers)
    return response.json()


@pytest.mark.integration
class TestIdentityMiddleware:
    """Tests for IdentityMiddleware."""

    @pytest.mark.asyncio
    async def test_no_headers(self, echo_app) -> None:
        """Test anonymous requests carry no user."""
        assert await _whoami(echo_app, {}) == {"user": None}

    @pytest.mark.asyncio
    async def test_known_role(self, echo_app) -> None:
        """Test a forwarded identity is resolved, role case-insensitively."""
        data = await _whoami(echo_app, {"X-User-Id": "u-1", "X-User-Role": "Instructor"})

        assert data == {"user": "u-1", "role": "instructor", "staff": True}

    @pytest.mark.asyncio
    async def test_unknown_role_is_ignored(self, echo_app) -> None:
        """Test identities with unknown roles are dropped."""
        data = await _whoami(echo_app, {"X-User-Id": "u-1", "X-User-Role": "registrar"})

        assert data == {"user": None}


class TestClientIdentifier:
    """Tests for rate limit keys."""

    def test_user_key(self) -> None:
        """Test identified users are keyed by user id."""
        request = MagicMock()
        request.state.user = CurrentUser("u-9", "student")

        assert get_client_identifier(request) == "user:u-9"

    def test_ip_key(self) -> None:
        """Test anonymous clients are keyed by address."""
        request = MagicMock()
        request.state.user = None
        request.client.host = "10.0.0.5"

        assert get_client_identifier(request) == "ip:10.0.0.5"
