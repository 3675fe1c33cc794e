# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Administrator account service.

This module provides the AdminService class for:
- Creating administrator accounts with role-derived permissions
- Looking up administrators
- Permission checks against the stored permission set
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.domains.admin.permissions import Permission, has_permission, resolve_permissions
from src.infrastructure.database.models import AdminAccount
from src.models.admin import AdminCreateRequest, AdminResponse

logger = logging.getLogger(__name__)


class AdminNotFoundError(NotFoundError):
    """Raised when administrator is not found."""


class AdminEmailExistsError(ConflictError):
    """Raised when an administrator with the email already exists."""


class AdminService:
    """Service for administrator accounts.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize admin service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_admin(self, request: AdminCreateRequest) -> AdminResponse:
        """Create an administrator account.

        Args:
            request: Account data.

        Returns:
            Created administrator.

        Raises:
            AdminEmailExistsError: If the email is already registered.
        """
        result = await self.db.execute(
            select(AdminAccount.id).where(AdminAccount.email == request.email)
        )
        if result.scalar_one_or_none():
            raise AdminEmailExistsError(
                "An administrator with this email already exists",
                {"email": request.email},
            )

        admin = AdminAccount(
            name=request.name.strip(),
            email=request.email,
            school_name=request.school_name,
            role=request.role.value,
            permissions=[p.value for p in resolve_permissions(request.role)],
        )

        try:
            self.db.add(admin)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AdminEmailExistsError(
                "An administrator with this email already exists",
                {"email": request.email},
            ) from e

        logger.info("Created administrator %s with role %s", admin.id, admin.role)

        return AdminResponse.model_validate(admin)

    async def get_admin(self, admin_id: str) -> AdminAccount:
        """Get administrator by ID.

        Raises:
            AdminNotFoundError: If not found.
        """
        result = await self.db.execute(select(AdminAccount).where(AdminAccount.id == admin_id))
        admin = result.scalar_one_or_none()
        if not admin:
            raise AdminNotFoundError(f"Administrator {admin_id} not found", {"admin_id": admin_id})
        return admin

    async def count_admins(self) -> int:
        """Count administrator accounts."""
        result = await self.db.execute(select(func.count(AdminAccount.id)))
        return result.scalar() or 0

    @staticmethod
    def has_permission(admin: AdminAccount, permission: Permission | str) -> bool:
        """Check whether an administrator holds a permission."""
        return has_permission(admin.permissions, permission)
