# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the connection module."""

import pytest
from sqlalchemy import text

from src.core.config import Settings
from src.infrastructure.database import connection
from src.infrastructure.database.dialect import dialect_insert, dialect_name
from src.infrastructure.database.models import Enrollment


class TestLifecycle:
    """Test initialization and shutdown."""

    @pytest.mark.asyncio
    async def test_uninitialized(self):
        await connection.close_database()

        assert await connection.check_database_connection() is False
        with pytest.raises(connection.DatabaseError):
            connection.get_engine()
        with pytest.raises(connection.DatabaseError):
            async with connection.get_session():
                pass

    @pytest.mark.asyncio
    async def test_init_and_close(self, monkeypatch):
        monkeypatch.setenv("DB_URL", "sqlite+aiosqlite:///:memory:")

        await connection.init_database(Settings())
        try:
            assert await connection.check_database_connection() is True
            async with connection.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                assert result.scalar() == 1
        finally:
            await connection.close_database()

        assert await connection.check_database_connection() is False


class TestDialect:
    """Test dialect-specific inserts."""

    @pytest.mark.asyncio
    async def test_sqlite_insert_supports_upsert(self, db_session):
        stmt = dialect_insert(db_session, Enrollment)

        assert dialect_name(db_session) == "sqlite"
        assert hasattr(stmt, "on_conflict_do_nothing")
