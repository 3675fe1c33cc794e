# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School administration API endpoints.

This module provides API routes for administrators:
- /admin/accounts - Administrator accounts
- /admin/classes - Classes, students, class teacher and subjects
- /admin/subjects - Subject updates, removal and enrollments
- /admin/dashboard - Counts for the active academic year
"""

from fastapi import APIRouter

from src.api.v1.admin.accounts import router as accounts_router
from src.api.v1.admin.classes import router as classes_router
from src.api.v1.admin.dashboard import router as dashboard_router
from src.api.v1.admin.subjects import router as subjects_router

router = APIRouter(prefix="/admin", tags=["Administration"])

router.include_router(accounts_router, prefix="/accounts", tags=["Admin Accounts"])
router.include_router(classes_router, prefix="/classes", tags=["Classes"])
router.include_router(subjects_router, prefix="/subjects", tags=["Subjects"])
router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])

__all__ = ["router"]
