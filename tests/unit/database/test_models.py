# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests table definitions and the constraints backing the roster and
progress invariants.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from src.infrastructure.database.models import (
    Base,
    Class,
    Enrollment,
    ProgressRecord,
    Student,
    Subject,
    generate_uuid,
)
from src.infrastructure.database.models.base import TimestampMixin
from src.infrastructure.database.seeds.demo import (
    ACADEMIC_YEAR_ID,
    CLASS_ID,
    MATH_SUBJECT_ID,
    STUDENT_ID,
    TEACHER_ID,
)


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_timestamp_mixin_has_created_at(self):
        """Verify TimestampMixin has created_at field."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_generate_uuid(self):
        assert len(generate_uuid()) == 36
        assert generate_uuid() != generate_uuid()

    def test_all_tables_registered(self):
        assert set(Base.metadata.tables) == {
            "academic_years",
            "teachers",
            "classes",
            "students",
            "subjects",
            "units",
            "questions",
            "test_results",
            "progress_records",
            "enrollments",
            "admin_accounts",
        }


class TestConstraints:
    """Test constraints enforced by the database."""

    @pytest.mark.asyncio
    async def test_enrollment_pair_is_unique(self, db_session, demo):
        db_session.add(Enrollment(student_id=STUDENT_ID, subject_id=MATH_SUBJECT_ID))

        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_progress_pair_is_unique(self, db_session, demo):
        db_session.add(ProgressRecord(student_id=STUDENT_ID, subject_id=MATH_SUBJECT_ID))
        await db_session.commit()
        db_session.add(ProgressRecord(student_id=STUDENT_ID, subject_id=MATH_SUBJECT_ID))

        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_active_subject_code_is_unique_per_class(self, db_session, demo):
        db_session.add(Subject(name="Maths II", code="MATH", class_id=CLASS_ID))

        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_inactive_subject_does_not_block_code(self, db_session, demo):
        db_session.add(Subject(name="Old Maths", code="MATH", class_id=CLASS_ID, is_active=False))
        await db_session.commit()

    @pytest.mark.asyncio
    async def test_teacher_leads_one_active_class(self, db_session, demo):
        db_session.add(
            Class(
                name="Grade 12 - A",
                grade="Grade 12",
                academic_year_id=ACADEMIC_YEAR_ID,
                class_teacher_id=TEACHER_ID,
            )
        )

        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_student_email_is_unique(self, db_session, demo):
        db_session.add(
            Student(name="Copy", email="demo@edupractice.com", class_id=CLASS_ID, roll_number="99")
        )

        with pytest.raises(IntegrityError):
            await db_session.commit()
