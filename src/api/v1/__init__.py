# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.

Modules:
    practice: Test submission, history and progress for students.
    admin: Administrator accounts, class roster and subject administration.
"""

from fastapi import APIRouter

from src.api.v1 import practice
from src.api.v1.admin import router as admin_router

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(practice.router, prefix="/practice", tags=["Practice"])
router.include_router(admin_router)

__all__ = ["router"]
