# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware package.

Middleware:
    identity: Reads gateway identity headers into request.state.user.
"""

from src.api.middleware.identity import CurrentUser, IdentityMiddleware, get_current_user

__all__ = [
    "CurrentUser",
    "IdentityMiddleware",
    "get_current_user",
]
