# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Administrator roles and the permissions they grant.

The role-to-permission mapping is closed: permissions are resolved once
when an administrator account is created and stored with it.

Example:
    >>> resolve_permissions(Role.TEACHER)
    [<Permission.MANAGE_QUESTIONS: 'manage_questions'>, <Permission.VIEW_ANALYTICS: 'view_analytics'>]
"""

from typing import Iterable

from src.models.common import Permission, Role

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(
        {
            Permission.MANAGE_SUBJECTS,
            Permission.MANAGE_QUESTIONS,
            Permission.VIEW_ANALYTICS,
            Permission.MANAGE_ENROLLMENTS,
            Permission.MANAGE_CLASSES,
        }
    ),
    Role.TEACHER: frozenset(
        {
            Permission.MANAGE_QUESTIONS,
            Permission.VIEW_ANALYTICS,
        }
    ),
    Role.SUPER_ADMIN: frozenset({Permission.ALL}),
}


def resolve_permissions(role: Role | str) -> list[Permission]:
    """Resolve the permissions granted by a role, in declaration order.

    Args:
        role: Role or its string value.

    Returns:
        Granted permissions.

    Raises:
        ValueError: If the role is unknown.
    """
    granted = ROLE_PERMISSIONS[Role(role)]
    return [permission for permission in Permission if permission in granted]


def has_permission(granted: Iterable[Permission | str], permission: Permission | str) -> bool:
    """Check a stored permission set, honouring the ``*`` wildcard.

    Args:
        granted: Stored permissions of an administrator.
        permission: Required permission.

    Returns:
        True if the permission is granted.
    """
    codes = {Permission(code) for code in granted}
    return Permission.ALL in codes or Permission(permission) in codes
