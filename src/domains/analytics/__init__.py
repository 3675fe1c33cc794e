# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain package.

Read-only statistics for students and administrators.
"""

from src.domains.analytics.service import StatsService, StudentNotFoundError

__all__ = [
    "StatsService",
    "StudentNotFoundError",
]
