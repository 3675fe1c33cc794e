# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- An in-memory SQLite database created from the ORM metadata
- A session on that database, seeded with the demo data set
- Small factories for classes, students and subjects
"""

import logging
from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.core.config import clear_settings_cache
from src.infrastructure.database.connection import build_engine, build_sessionmaker
from src.infrastructure.database.models import Base, Class, Student, Subject, Teacher
from src.infrastructure.database.seeds.demo import seed_demo_data

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def isolated_logging() -> Generator[None, None, None]:
    """Undo logging configuration installed by create_app or setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with all tables."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on the empty test database."""
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
async def demo(db_session: AsyncSession) -> dict[str, Any]:
    """Seed the demo data set and return the seeded entities."""
    return await seed_demo_data(db_session)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_class(db_session: AsyncSession):
    """Factory creating an extra class in the demo academic year."""

    async def _make(name: str = "Grade 10 - B", max_students: int = 40, **kwargs: Any) -> Class:
        class_ = Class(
            name=name,
            grade=kwargs.pop("grade", "Grade 10"),
            max_students=max_students,
            academic_year_id=kwargs.pop("academic_year_id", "academic-year-2025"),
            **kwargs,
        )
        db_session.add(class_)
        await db_session.commit()
        return class_

    return _make


@pytest.fixture
def make_student(db_session: AsyncSession):
    """Factory inserting a student directly, bypassing roster checks."""
    counter = {"n": 0}

    async def _make(class_id: str, **kwargs: Any) -> Student:
        counter["n"] += 1
        n = counter["n"]
        student = Student(
            name=kwargs.pop("name", f"Student {n}"),
            email=kwargs.pop("email", f"student{n}@example.com"),
            roll_number=kwargs.pop("roll_number", f"R{n}"),
            class_id=class_id,
            **kwargs,
        )
        db_session.add(student)
        await db_session.commit()
        return student

    return _make


@pytest.fixture
def make_subject(db_session: AsyncSession):
    """Factory inserting a subject directly, bypassing enrollment propagation."""

    async def _make(class_id: str, name: str, code: str, **kwargs: Any) -> Subject:
        subject = Subject(name=name, code=code, class_id=class_id, **kwargs)
        db_session.add(subject)
        await db_session.commit()
        return subject

    return _make


@pytest.fixture
def make_teacher(db_session: AsyncSession):
    """Factory inserting a teacher."""
    counter = {"n": 0}

    async def _make(**kwargs: Any) -> Teacher:
        counter["n"] += 1
        n = counter["n"]
        teacher = Teacher(
            name=kwargs.pop("name", f"Teacher {n}"),
            email=kwargs.pop("email", f"teacher{n}@example.com"),
            **kwargs,
        )
        db_session.add(teacher)
        await db_session.commit()
        return teacher

    return _make
