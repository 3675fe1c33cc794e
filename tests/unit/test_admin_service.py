# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for administrator accounts and permissions."""

import pytest

from src.domains.admin import (
    AdminEmailExistsError,
    AdminNotFoundError,
    AdminService,
    has_permission,
    resolve_permissions,
)
from src.infrastructure.database.seeds.demo import ADMIN_ID
from src.models.admin import AdminCreateRequest
from src.models.common import Permission, Role


class TestResolvePermissions:
    """Tests for the role-to-permission mapping."""

    def test_admin(self) -> None:
        assert resolve_permissions(Role.ADMIN) == [
            Permission.MANAGE_SUBJECTS,
            Permission.MANAGE_QUESTIONS,
            Permission.VIEW_ANALYTICS,
            Permission.MANAGE_ENROLLMENTS,
            Permission.MANAGE_CLASSES,
        ]

    def test_teacher(self) -> None:
        assert resolve_permissions("teacher") == [
            Permission.MANAGE_QUESTIONS,
            Permission.VIEW_ANALYTICS,
        ]

    def test_super_admin(self) -> None:
        assert resolve_permissions(Role.SUPER_ADMIN) == [Permission.ALL]

    def test_unknown_role(self) -> None:
        with pytest.raises(ValueError):
            resolve_permissions("principal")


class TestHasPermission:
    """Tests for permission checks."""

    def test_wildcard_grants_everything(self) -> None:
        assert has_permission(["*"], Permission.MANAGE_CLASSES)
        assert has_permission(["*"], "manage_enrollments")

    def test_explicit_permission(self) -> None:
        granted = ["manage_questions", "view_analytics"]

        assert has_permission(granted, Permission.VIEW_ANALYTICS)
        assert not has_permission(granted, Permission.MANAGE_SUBJECTS)

    def test_nothing_granted(self) -> None:
        assert not has_permission([], Permission.VIEW_ANALYTICS)


class TestAdminService:
    """Tests for AdminService."""

    @pytest.mark.asyncio
    async def test_create_admin_stores_role_permissions(self, db_session) -> None:
        service = AdminService(db_session)

        admin = await service.create_admin(
            AdminCreateRequest(name=" Jane Doe ", email="Jane@School.org", role=Role.TEACHER)
        )

        assert admin.name == "Jane Doe"
        assert admin.email == "jane@school.org"
        assert admin.role == Role.TEACHER
        assert admin.permissions == [Permission.MANAGE_QUESTIONS, Permission.VIEW_ANALYTICS]
        assert await service.count_admins() == 1

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session, demo) -> None:
        with pytest.raises(AdminEmailExistsError):
            await AdminService(db_session).create_admin(
                AdminCreateRequest(name="Other", email="admin@edupractice.com")
            )

    @pytest.mark.asyncio
    async def test_get_admin(self, db_session, demo) -> None:
        service = AdminService(db_session)

        admin = await service.get_admin(ADMIN_ID)

        assert admin.role == Role.SUPER_ADMIN.value
        assert service.has_permission(admin, Permission.MANAGE_CLASSES)

    @pytest.mark.asyncio
    async def test_get_unknown_admin(self, db_session) -> None:
        with pytest.raises(AdminNotFoundError):
            await AdminService(db_session).get_admin("missing")
