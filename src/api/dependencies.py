# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the caller identity forwarded by the gateway
- Check administrator permissions

Example:
    @router.post("/classes/{class_id}/students")
    async def add_student(
        class_id: str,
        db: AsyncSession = Depends(get_db),
        admin: AdminAccount = Depends(RequirePermission(Permission.MANAGE_CLASSES)),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.identity import CurrentUser, get_current_user
from src.core.config import Settings, get_settings
from src.domains.admin.permissions import has_permission
from src.domains.admin.service import AdminNotFoundError, AdminService
from src.infrastructure.database.connection import get_session
from src.infrastructure.database.models import AdminAccount
from src.models.common import Permission

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession bound to the application engine.
    """
    async with get_session() as session:
        yield session


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


# =========================================================================
# Identity Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require a caller identity.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If the gateway sent no identity.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_student(request: Request) -> CurrentUser:
    """Require student caller.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated or not a student.
    """
    user = require_auth(request)
    if not user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )
    return user


async def get_current_admin(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AdminAccount:
    """Require an administrator caller and load their account.

    Args:
        request: HTTP request.
        db: Database session.

    Returns:
        Stored administrator account.

    Raises:
        HTTPException: If not an administrator or the account is unknown.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    try:
        return await AdminService(db).get_admin(user.id)
    except AdminNotFoundError:
        logger.warning("Unknown administrator in gateway headers: %s", user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unknown administrator",
        )


class RequirePermission:
    """Dependency for requiring an administrator permission.

    Permissions are read from the account, as resolved when it was created.

    Example:
        @router.delete("/subjects/{subject_id}")
        async def remove_subject(
            admin: AdminAccount = Depends(RequirePermission(Permission.MANAGE_SUBJECTS)),
        ):
            ...
    """

    def __init__(self, permission: Permission) -> None:
        """Initialize permission requirement.

        Args:
            permission: Required permission.
        """
        self.permission = permission

    def __call__(self, admin: AdminAccount = Depends(get_current_admin)) -> AdminAccount:
        """Check the permission and return the administrator.

        Raises:
            HTTPException: If the permission is missing.
        """
        if not has_permission(admin.permissions, self.permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {self.permission.value}",
            )
        return admin
