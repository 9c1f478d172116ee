"""Registrar enrollment service.

Course enrollment engine for a university information system: seat
allocation under capacity, prerequisite and term rules, and ordered
waitlist promotion.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
