# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin domain package.

Administrator accounts, roles and permissions.
"""

from src.domains.admin.permissions import (
    ROLE_PERMISSIONS,
    Permission,
    Role,
    has_permission,
    resolve_permissions,
)
from src.domains.admin.service import AdminEmailExistsError, AdminNotFoundError, AdminService

__all__ = [
    "AdminService",
    "AdminEmailExistsError",
    "AdminNotFoundError",
    "Permission",
    "Role",
    "ROLE_PERMISSIONS",
    "has_permission",
    "resolve_permissions",
]
