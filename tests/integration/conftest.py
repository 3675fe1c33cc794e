# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

The application is served in-process through httpx's ASGI transport, with
the database dependency bound to the seeded in-memory test session.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.app import create_app
from src.api.dependencies import get_db
from src.api.middleware.identity import USER_ID_HEADER, USER_TYPE_HEADER
from src.infrastructure.database.seeds.demo import ADMIN_ID, STUDENT_ID


@pytest.fixture
def app(db_session: AsyncSession, demo: dict[str, Any]) -> FastAPI:
    """Create the application bound to the seeded test database."""
    app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the application in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def identity(user_id: str, user_type: str) -> dict[str, str]:
    """Build the gateway identity headers."""
    return {USER_ID_HEADER: user_id, USER_TYPE_HEADER: user_type}


@pytest.fixture
def headers_for():
    """Factory for arbitrary gateway identities."""
    return identity


@pytest.fixture
def student_headers() -> dict[str, str]:
    """Headers of the demo student."""
    return identity(STUDENT_ID, "student")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers of the demo super admin."""
    return identity(ADMIN_ID, "admin")
