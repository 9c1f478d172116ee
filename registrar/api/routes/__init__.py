# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unversioned operational routes."""

from registrar.api.routes import health

__all__ = ["health"]
