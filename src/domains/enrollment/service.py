# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment registry for student-subject access edges.

This module provides the EnrollmentRegistry class for:
- Compulsory-subject propagation to every active student of a class
- Explicit bulk enrollment by an administrator
- Self-enrollment of a student in an optional subject of their class
- Soft deactivation of a subject's enrollments

Edges are created with ``INSERT ... ON CONFLICT DO NOTHING`` so that
repeated or concurrent calls converge to the same set without errors.
Enrollments are never hard-deleted here.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.infrastructure.database.dialect import dialect_insert
from src.infrastructure.database.models import Enrollment, Student, Subject, generate_uuid
from src.models.roster import BulkEnrollmentResult
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class SubjectNotFoundError(NotFoundError):
    """Raised when a subject is missing or no longer active."""


class InactiveStudentError(NotFoundError):
    """Raised when the enrolling student is missing or inactive."""


class AlreadyEnrolledError(ConflictError):
    """Raised when a student asks for a subject they are enrolled in."""


class EnrollmentRegistry:
    """Service for managing (student, subject) enrollments.

    ``ensure_compulsory_enrollment`` and ``deactivate_for_subject`` run
    inside the caller's transaction and never commit. ``enroll_students``
    and ``self_enroll`` are standalone actions and commit.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment registry.

        Args:
            db: Async database session.
        """
        self.db = db

    async def ensure_compulsory_enrollment(
        self,
        class_id: str,
        subject_id: str | None = None,
        student_id: str | None = None,
    ) -> int:
        """Enroll active students of a class in its compulsory subjects.

        Covers every (active student, active compulsory subject) pair of the
        class, optionally narrowed to one subject or one student. Existing
        edges are left untouched.

        Args:
            class_id: Class identifier.
            subject_id: Restrict to this subject.
            student_id: Restrict to this student.

        Returns:
            Number of enrollment edges created.
        """
        subject_query = select(Subject.id).where(
            Subject.class_id == class_id,
            Subject.is_active.is_(True),
            Subject.is_compulsory.is_(True),
        )
        if subject_id:
            subject_query = subject_query.where(Subject.id == subject_id)
        subject_ids = list((await self.db.execute(subject_query)).scalars().all())

        student_query = select(Student.id).where(
            Student.class_id == class_id,
            Student.is_active.is_(True),
        )
        if student_id:
            student_query = student_query.where(Student.id == student_id)
        student_ids = list((await self.db.execute(student_query)).scalars().all())

        pairs = [(stu, sub) for stu in student_ids for sub in subject_ids]
        created = await self._insert_edges(pairs)

        if created:
            logger.info(
                "Compulsory enrollment: class=%s, subject=%s, student=%s, created=%d",
                class_id,
                subject_id,
                student_id,
                created,
            )

        return created

    async def deactivate_for_subject(self, subject_id: str) -> int:
        """Deactivate every active enrollment of a subject.

        Args:
            subject_id: Subject identifier.

        Returns:
            Number of enrollments deactivated.
        """
        result = await self.db.execute(
            update(Enrollment)
            .where(
                Enrollment.subject_id == subject_id,
                Enrollment.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        count = result.rowcount or 0

        logger.info("Deactivated %d enrollments of subject %s", count, subject_id)

        return count

    async def enroll_students(
        self,
        subject_id: str,
        student_ids: Iterable[str],
    ) -> BulkEnrollmentResult:
        """Explicitly enroll students in a subject.

        Each student is attempted independently: unknown students are
        reported, already enrolled students are counted, the rest are
        enrolled.

        Args:
            subject_id: Subject identifier.
            student_ids: Students to enroll; duplicates are ignored.

        Returns:
            Per-outcome counts.

        Raises:
            SubjectNotFoundError: If the subject is missing or inactive.
        """
        await self._get_active_subject(subject_id)

        requested = list(dict.fromkeys(student_ids))
        result = await self.db.execute(select(Student.id).where(Student.id.in_(requested)))
        existing_ids = set(result.scalars().all())

        not_found = [sid for sid in requested if sid not in existing_ids]
        found = [sid for sid in requested if sid in existing_ids]

        created = await self._insert_edges([(sid, subject_id) for sid in found])
        await self.db.commit()

        logger.info(
            "Enrolled students: subject=%s, successful=%d, already=%d, not_found=%d",
            subject_id,
            created,
            len(found) - created,
            len(not_found),
        )

        return BulkEnrollmentResult(
            successful=created,
            already_enrolled=len(found) - created,
            not_found=not_found,
            total=len(requested),
        )

    async def self_enroll(self, student_id: str, subject_id: str) -> Enrollment:
        """Enroll a student in an optional subject of their own class.

        Compulsory subjects are reached through propagation only, so they are
        reported as unavailable here.

        Args:
            student_id: Enrolling student.
            subject_id: Optional subject of the student's class.

        Returns:
            The new enrollment.

        Raises:
            InactiveStudentError: If the student is missing or inactive.
            SubjectNotFoundError: If the subject is missing, inactive,
                compulsory or outside the student's class.
            AlreadyEnrolledError: If an enrollment for the pair exists.
        """
        result = await self.db.execute(
            select(Student.class_id).where(Student.id == student_id, Student.is_active.is_(True))
        )
        class_id = result.scalar_one_or_none()
        if class_id is None:
            raise InactiveStudentError(
                f"Student {student_id} not found",
                {"student_id": student_id},
            )

        result = await self.db.execute(
            select(Subject.id).where(
                Subject.id == subject_id,
                Subject.class_id == class_id,
                Subject.is_active.is_(True),
                Subject.is_compulsory.is_(False),
            )
        )
        if result.scalar_one_or_none() is None:
            raise SubjectNotFoundError(
                f"Subject {subject_id} is not available for enrollment",
                {"subject_id": subject_id},
            )

        created = await self._insert_edges([(student_id, subject_id)])
        if not created:
            await self.db.rollback()
            raise AlreadyEnrolledError(
                "Already enrolled in this subject",
                {"student_id": student_id, "subject_id": subject_id},
            )
        await self.db.commit()

        logger.info("Student %s enrolled in subject %s", student_id, subject_id)

        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.subject_id == subject_id,
            )
        )
        return result.scalar_one()

    async def list_enrollments(
        self,
        subject_id: str,
        active_only: bool = True,
    ) -> list[Enrollment]:
        """List enrollments of a subject, oldest first.

        Args:
            subject_id: Subject identifier.
            active_only: Skip deactivated enrollments.

        Returns:
            Matching enrollments.
        """
        query = select(Enrollment).where(Enrollment.subject_id == subject_id)
        if active_only:
            query = query.where(Enrollment.is_active.is_(True))
        query = query.order_by(Enrollment.enrolled_at)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _insert_edges(self, pairs: list[tuple[str, str]]) -> int:
        """Insert (student_id, subject_id) edges, skipping existing ones."""
        if not pairs:
            return 0

        now = utc_now()
        stmt = (
            dialect_insert(self.db, Enrollment)
            .values(
                [
                    {
                        "id": generate_uuid(),
                        "student_id": student_id,
                        "subject_id": subject_id,
                        "is_active": True,
                        "enrolled_at": now,
                    }
                    for student_id, subject_id in pairs
                ]
            )
            .on_conflict_do_nothing(index_elements=["student_id", "subject_id"])
            .returning(Enrollment.__table__.c.id)
        )
        result = await self.db.execute(stmt)
        return len(result.scalars().all())

    async def _get_active_subject(self, subject_id: str) -> Subject:
        result = await self.db.execute(
            select(Subject).where(
                Subject.id == subject_id,
                Subject.is_active.is_(True),
            )
        )
        subject = result.scalar_one_or_none()
        if not subject:
            raise SubjectNotFoundError(
                f"Subject {subject_id} not found",
                {"subject_id": subject_id},
            )
        return subject
