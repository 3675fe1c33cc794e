# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment registry."""

import pytest
from sqlalchemy import func, select

from src.domains.enrollment import (
    AlreadyEnrolledError,
    EnrollmentRegistry,
    InactiveStudentError,
    SubjectNotFoundError,
)
from src.infrastructure.database.models import Enrollment
from src.infrastructure.database.seeds.demo import (
    CLASS_ID,
    MATH_SUBJECT_ID,
    PHYSICS_SUBJECT_ID,
    STUDENT_ID,
)


async def _count_enrollments(db_session, **filters) -> int:
    query = select(func.count(Enrollment.id))
    for field, value in filters.items():
        query = query.where(getattr(Enrollment, field) == value)
    result = await db_session.execute(query)
    return result.scalar()


class TestEnsureCompulsoryEnrollment:
    """Tests for compulsory-subject propagation."""

    @pytest.mark.asyncio
    async def test_demo_student_enrolled_in_compulsory_subject(self, db_session, demo) -> None:
        assert demo["enrollments_created"] == 1
        assert await _count_enrollments(db_session, student_id=STUDENT_ID) == 1
        assert await _count_enrollments(db_session, subject_id=MATH_SUBJECT_ID) == 1
        assert await _count_enrollments(db_session, subject_id=PHYSICS_SUBJECT_ID) == 0

    @pytest.mark.asyncio
    async def test_is_idempotent(self, db_session, demo) -> None:
        registry = EnrollmentRegistry(db_session)

        first = await registry.ensure_compulsory_enrollment(CLASS_ID)
        second = await registry.ensure_compulsory_enrollment(CLASS_ID)
        await db_session.commit()

        assert first == 0
        assert second == 0
        assert await _count_enrollments(db_session) == 1

    @pytest.mark.asyncio
    async def test_covers_every_active_student(self, db_session, demo, make_student) -> None:
        await make_student(CLASS_ID)
        await make_student(CLASS_ID)
        await make_student(CLASS_ID, is_active=False)

        created = await EnrollmentRegistry(db_session).ensure_compulsory_enrollment(CLASS_ID)
        await db_session.commit()

        assert created == 2
        assert await _count_enrollments(db_session, subject_id=MATH_SUBJECT_ID) == 3

    @pytest.mark.asyncio
    async def test_narrowed_to_one_student(self, db_session, demo, make_student) -> None:
        first = await make_student(CLASS_ID)
        await make_student(CLASS_ID)

        created = await EnrollmentRegistry(db_session).ensure_compulsory_enrollment(
            CLASS_ID, student_id=first.id
        )

        assert created == 1
        assert await _count_enrollments(db_session, student_id=first.id) == 1

    @pytest.mark.asyncio
    async def test_skips_optional_subject(self, db_session, demo) -> None:
        created = await EnrollmentRegistry(db_session).ensure_compulsory_enrollment(
            CLASS_ID, subject_id=PHYSICS_SUBJECT_ID
        )

        assert created == 0


class TestDeactivateForSubject:
    """Tests for soft deactivation."""

    @pytest.mark.asyncio
    async def test_deactivates_active_enrollments(self, db_session, demo) -> None:
        registry = EnrollmentRegistry(db_session)

        count = await registry.deactivate_for_subject(MATH_SUBJECT_ID)
        await db_session.commit()

        assert count == 1
        assert await registry.list_enrollments(MATH_SUBJECT_ID) == []
        remaining = await registry.list_enrollments(MATH_SUBJECT_ID, active_only=False)
        assert len(remaining) == 1
        assert remaining[0].is_active is False

    @pytest.mark.asyncio
    async def test_nothing_to_deactivate(self, db_session, demo) -> None:
        count = await EnrollmentRegistry(db_session).deactivate_for_subject(PHYSICS_SUBJECT_ID)

        assert count == 0


class TestEnrollStudents:
    """Tests for explicit bulk enrollment."""

    @pytest.mark.asyncio
    async def test_reports_each_outcome(self, db_session, demo, make_student) -> None:
        other = await make_student(CLASS_ID)
        registry = EnrollmentRegistry(db_session)

        await registry.enroll_students(PHYSICS_SUBJECT_ID, [STUDENT_ID])
        result = await registry.enroll_students(
            PHYSICS_SUBJECT_ID, [STUDENT_ID, other.id, "missing-student", other.id]
        )

        assert result.successful == 1
        assert result.already_enrolled == 1
        assert result.not_found == ["missing-student"]
        assert result.total == 3
        assert await _count_enrollments(db_session, subject_id=PHYSICS_SUBJECT_ID) == 2

    @pytest.mark.asyncio
    async def test_unknown_subject(self, db_session, demo) -> None:
        with pytest.raises(SubjectNotFoundError):
            await EnrollmentRegistry(db_session).enroll_students("missing-subject", [STUDENT_ID])

    @pytest.mark.asyncio
    async def test_inactive_subject(self, db_session, demo, make_subject) -> None:
        subject = await make_subject(CLASS_ID, "Chemistry", "CHEM", is_active=False)

        with pytest.raises(SubjectNotFoundError):
            await EnrollmentRegistry(db_session).enroll_students(subject.id, [STUDENT_ID])

    @pytest.mark.asyncio
    async def test_lists_oldest_first(self, db_session, demo, make_student) -> None:
        other = await make_student(CLASS_ID)
        registry = EnrollmentRegistry(db_session)

        await registry.enroll_students(PHYSICS_SUBJECT_ID, [STUDENT_ID])
        await registry.enroll_students(PHYSICS_SUBJECT_ID, [other.id])

        enrollments = await registry.list_enrollments(PHYSICS_SUBJECT_ID)

        assert [e.student_id for e in enrollments] == [STUDENT_ID, other.id]


class TestSelfEnroll:
    """Tests for a student taking an optional subject."""

    @pytest.mark.asyncio
    async def test_enrolls_in_optional_subject(self, db_session, demo) -> None:
        enrollment = await EnrollmentRegistry(db_session).self_enroll(STUDENT_ID, PHYSICS_SUBJECT_ID)

        assert enrollment.student_id == STUDENT_ID
        assert enrollment.subject_id == PHYSICS_SUBJECT_ID
        assert enrollment.is_active is True
        assert await _count_enrollments(db_session, subject_id=PHYSICS_SUBJECT_ID) == 1

    @pytest.mark.asyncio
    async def test_second_request_conflicts(self, db_session, demo) -> None:
        registry = EnrollmentRegistry(db_session)
        await registry.self_enroll(STUDENT_ID, PHYSICS_SUBJECT_ID)

        with pytest.raises(AlreadyEnrolledError):
            await registry.self_enroll(STUDENT_ID, PHYSICS_SUBJECT_ID)

        assert await _count_enrollments(db_session, subject_id=PHYSICS_SUBJECT_ID) == 1

    @pytest.mark.asyncio
    async def test_compulsory_subject_is_not_offered(self, db_session, demo) -> None:
        with pytest.raises(SubjectNotFoundError):
            await EnrollmentRegistry(db_session).self_enroll(STUDENT_ID, MATH_SUBJECT_ID)

    @pytest.mark.asyncio
    async def test_subject_of_another_class(self, db_session, demo, make_class, make_subject) -> None:
        class_ = await make_class()
        subject = await make_subject(class_.id, "Biology", "BIO")

        with pytest.raises(SubjectNotFoundError):
            await EnrollmentRegistry(db_session).self_enroll(STUDENT_ID, subject.id)

        assert await _count_enrollments(db_session, subject_id=subject.id) == 0

    @pytest.mark.asyncio
    async def test_inactive_subject(self, db_session, demo, make_subject) -> None:
        subject = await make_subject(CLASS_ID, "Chemistry", "CHEM", is_active=False)

        with pytest.raises(SubjectNotFoundError):
            await EnrollmentRegistry(db_session).self_enroll(STUDENT_ID, subject.id)

    @pytest.mark.asyncio
    async def test_inactive_student(self, db_session, demo, make_student) -> None:
        student = await make_student(CLASS_ID, is_active=False)

        with pytest.raises(InactiveStudentError):
            await EnrollmentRegistry(db_session).self_enroll(student.id, PHYSICS_SUBJECT_ID)
