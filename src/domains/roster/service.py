# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class roster service for administrative mutations.

This module provides the ClassRosterGuard class for:
- Class creation and class teacher assignment
- Adding and removing students within class capacity
- Adding, updating and removing subjects of a class
- Reading a class with its teacher, students and subjects

Every mutation keeps the roster invariants:
- a class never holds more active students than ``max_students``
- student emails are unique, roll numbers are unique within a class
- a teacher is class teacher of at most one active class
- subject names and codes are unique among the active subjects of a class
- compulsory subjects are enrolled by every active student of the class

Checks run before writing; the unique constraints and the partial unique
index are the last line, and an IntegrityError at flush or commit is
reported as a conflict.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.errors import CapacityError, ConflictError, NotFoundError, ValidationError
from src.domains.enrollment.service import EnrollmentRegistry, SubjectNotFoundError
from src.infrastructure.database.models import (
    AcademicYear,
    Class,
    Enrollment,
    ProgressRecord,
    Student,
    Subject,
    Teacher,
    TestResult,
)
from src.models.roster import (
    ClassCreateRequest,
    ClassResponse,
    ClassRosterResponse,
    StudentCreateRequest,
    StudentResponse,
    SubjectCreateRequest,
    SubjectResponse,
    SubjectUpdateRequest,
    TeacherSummary,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_STUDENTS = 40


class ClassNotFoundError(NotFoundError):
    """Raised when class is not found."""


class StudentNotFoundError(NotFoundError):
    """Raised when student is not found in the class."""


class TeacherNotFoundError(NotFoundError):
    """Raised when teacher is not found."""


class AcademicYearNotFoundError(NotFoundError):
    """Raised when no usable academic year exists."""


class ClassNameExistsError(ConflictError):
    """Raised when class name already exists in the academic year."""


class DuplicateStudentError(ConflictError):
    """Raised when student email or roll number is already taken."""


class TeacherAlreadyAssignedError(ConflictError):
    """Raised when teacher is class teacher of another active class."""


class DuplicateSubjectError(ConflictError):
    """Raised when subject name or code clashes with an active subject."""


class InactiveSubjectError(ConflictError):
    """Raised when updating a subject that was removed."""


class ClassRosterGuard:
    """Service for class, teacher, student and subject administration.

    Attributes:
        db: Async database session.
        default_max_students: Capacity of classes created without one.
        enrollments: Registry used for compulsory-subject propagation.
    """

    def __init__(self, db: AsyncSession, default_max_students: int = DEFAULT_MAX_STUDENTS) -> None:
        """Initialize class roster guard.

        Args:
            db: Async database session.
            default_max_students: Capacity of classes created without one.
        """
        self.db = db
        self.default_max_students = default_max_students
        self.enrollments = EnrollmentRegistry(db)

    async def create_class(
        self,
        request: ClassCreateRequest,
        created_by: str | None = None,
    ) -> ClassResponse:
        """Create a new class.

        Args:
            request: Class creation data.
            created_by: ID of the administrator creating the class.

        Returns:
            Created class response.

        Raises:
            AcademicYearNotFoundError: If the academic year is missing.
            TeacherNotFoundError: If the class teacher is missing.
            TeacherAlreadyAssignedError: If the teacher leads another class.
            ClassNameExistsError: If the name exists in the academic year.
        """
        academic_year = await self._resolve_academic_year(request.academic_year_id)

        if request.class_teacher_id:
            await self._get_teacher(request.class_teacher_id)
            await self._ensure_teacher_available(request.class_teacher_id)

        existing = await self.db.execute(
            select(Class.id).where(
                Class.academic_year_id == academic_year.id,
                Class.name == request.name,
            )
        )
        if existing.scalar_one_or_none():
            raise ClassNameExistsError(
                f"Class '{request.name}' already exists in academic year {academic_year.name}",
                {"name": request.name, "academic_year_id": academic_year.id},
            )

        class_ = Class(
            name=request.name,
            grade=request.grade,
            section=request.section,
            max_students=request.max_students or self.default_max_students,
            academic_year_id=academic_year.id,
            class_teacher_id=request.class_teacher_id,
            is_active=True,
            created_by=created_by,
        )

        async with self._conflicts_as(ClassNameExistsError, "Class conflicts with an existing class"):
            self.db.add(class_)
            await self.db.commit()

        logger.info("Created class: %s (%s) by %s", class_.name, class_.id, created_by)

        return ClassResponse.model_validate(class_)

    async def add_student(
        self,
        class_id: str,
        request: StudentCreateRequest,
    ) -> StudentResponse:
        """Add a student to a class and enroll them in compulsory subjects.

        The class row is locked for the duration of the capacity check.

        Args:
            class_id: Class identifier.
            request: Student data.

        Returns:
            Created student response.

        Raises:
            ClassNotFoundError: If class not found.
            CapacityError: If the class is full.
            DuplicateStudentError: If email or roll number is taken.
        """
        class_ = await self._get_class(class_id, for_update=True)

        active_count = await self._count_active_students(class_id)
        if active_count >= class_.max_students:
            raise CapacityError(
                f"Class {class_.name} is full ({active_count}/{class_.max_students})",
                max_students=class_.max_students,
                details={"class_id": class_id, "active_students": active_count},
            )

        result = await self.db.execute(select(Student.id).where(Student.email == request.email))
        if result.scalar_one_or_none():
            raise DuplicateStudentError(
                "A student with this email already exists",
                {"field": "email", "email": request.email},
            )

        if request.roll_number:
            result = await self.db.execute(
                select(Student.id).where(
                    Student.class_id == class_id,
                    Student.roll_number == request.roll_number,
                )
            )
            if result.scalar_one_or_none():
                raise DuplicateStudentError(
                    f"Roll number {request.roll_number} already exists in this class",
                    {"field": "roll_number", "roll_number": request.roll_number},
                )

        student = Student(
            name=request.name.strip(),
            email=request.email,
            roll_number=request.roll_number,
            parent_phone=request.parent_phone,
            class_id=class_id,
            is_active=True,
        )

        async with self._conflicts_as(DuplicateStudentError, "Student conflicts with an existing student"):
            self.db.add(student)
            await self.db.flush()
            enrolled = await self.enrollments.ensure_compulsory_enrollment(
                class_id, student_id=student.id
            )
            await self.db.commit()

        logger.info(
            "Added student %s to class %s (compulsory enrollments: %d)",
            student.id,
            class_id,
            enrolled,
        )

        return StudentResponse.model_validate(student)

    async def remove_student(self, class_id: str, student_id: str) -> None:
        """Remove a student and everything recorded for them.

        Enrollments, progress records and test results of the student are
        deleted with the student row.

        Args:
            class_id: Class identifier.
            student_id: Student identifier.

        Raises:
            StudentNotFoundError: If the student is not in the class.
        """
        result = await self.db.execute(
            select(Student).where(
                Student.id == student_id,
                Student.class_id == class_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(
                f"Student {student_id} not found in class {class_id}",
                {"class_id": class_id, "student_id": student_id},
            )

        await self.db.execute(delete(Enrollment).where(Enrollment.student_id == student_id))
        await self.db.execute(delete(ProgressRecord).where(ProgressRecord.student_id == student_id))
        await self.db.execute(delete(TestResult).where(TestResult.student_id == student_id))
        await self.db.delete(student)
        await self.db.commit()

        logger.info("Removed student %s from class %s", student_id, class_id)

    async def assign_class_teacher(self, class_id: str, teacher_id: str) -> ClassResponse:
        """Make a teacher the class teacher, replacing any previous one.

        Args:
            class_id: Class identifier.
            teacher_id: Teacher identifier.

        Returns:
            Updated class response.

        Raises:
            ClassNotFoundError: If class not found.
            TeacherNotFoundError: If teacher not found.
            TeacherAlreadyAssignedError: If the teacher leads another active class.
        """
        class_ = await self._get_class(class_id, for_update=True)
        await self._get_teacher(teacher_id)
        await self._ensure_teacher_available(teacher_id, exclude_class_id=class_id)

        previous = class_.class_teacher_id
        class_.class_teacher_id = teacher_id

        async with self._conflicts_as(
            TeacherAlreadyAssignedError, "Teacher is already assigned to another class"
        ):
            await self.db.commit()

        logger.info(
            "Assigned class teacher: class=%s, teacher=%s, previous=%s",
            class_id,
            teacher_id,
            previous,
        )

        return ClassResponse.model_validate(class_)

    async def add_subject(self, class_id: str, request: SubjectCreateRequest) -> SubjectResponse:
        """Add a subject to a class.

        Compulsory subjects are enrolled by every active student at once.

        Args:
            class_id: Class identifier.
            request: Subject data.

        Returns:
            Created subject response.

        Raises:
            ClassNotFoundError: If class not found.
            ValidationError: If name or code is blank.
            DuplicateSubjectError: If name or code clashes with an active subject.
        """
        await self._get_class(class_id)

        name = _normalize_name(request.name)
        code = _normalize_code(request.code)
        await self._ensure_subject_unique(class_id, name, code)

        subject = Subject(
            name=name,
            code=code,
            description=request.description,
            icon=request.icon,
            color=request.color,
            is_compulsory=request.is_compulsory,
            is_active=True,
            class_id=class_id,
        )

        async with self._conflicts_as(DuplicateSubjectError, "Subject conflicts with an active subject"):
            self.db.add(subject)
            await self.db.flush()
            enrolled = 0
            if subject.is_compulsory:
                enrolled = await self.enrollments.ensure_compulsory_enrollment(
                    class_id, subject_id=subject.id
                )
            await self.db.commit()

        logger.info(
            "Added subject %s (%s) to class %s (compulsory enrollments: %d)",
            subject.code,
            subject.id,
            class_id,
            enrolled,
        )

        return SubjectResponse.model_validate(subject)

    async def update_subject(
        self,
        subject_id: str,
        request: SubjectUpdateRequest,
    ) -> SubjectResponse:
        """Update a subject.

        Becoming compulsory enrolls every active student of the class.
        Becoming optional keeps existing enrollments.

        Args:
            subject_id: Subject identifier.
            request: Fields to change.

        Returns:
            Updated subject response.

        Raises:
            SubjectNotFoundError: If subject not found.
            InactiveSubjectError: If the subject was removed.
            DuplicateSubjectError: If name or code clashes with an active subject.
        """
        subject = await self._get_subject(subject_id)
        if not subject.is_active:
            raise InactiveSubjectError(
                f"Subject {subject_id} has been removed and cannot be updated",
                {"subject_id": subject_id},
            )

        update_data = request.model_dump(exclude_unset=True)
        if update_data.get("name") is not None:
            update_data["name"] = _normalize_name(update_data["name"])
        if update_data.get("code") is not None:
            update_data["code"] = _normalize_code(update_data["code"])

        name = update_data.get("name") or subject.name
        code = update_data.get("code") or subject.code
        if name != subject.name or code != subject.code:
            await self._ensure_subject_unique(subject.class_id, name, code, exclude_id=subject.id)

        became_compulsory = update_data.get("is_compulsory") is True and not subject.is_compulsory

        for field, value in update_data.items():
            # name, code and is_compulsory are NOT NULL
            if value is None and field in ("name", "code", "is_compulsory"):
                continue
            setattr(subject, field, value)

        async with self._conflicts_as(DuplicateSubjectError, "Subject conflicts with an active subject"):
            await self.db.flush()
            if became_compulsory:
                await self.enrollments.ensure_compulsory_enrollment(
                    subject.class_id, subject_id=subject.id
                )
            await self.db.commit()

        logger.info("Updated subject %s: %s", subject_id, sorted(update_data))

        return SubjectResponse.model_validate(subject)

    async def remove_subject(self, subject_id: str) -> None:
        """Deactivate a subject and its enrollments.

        Args:
            subject_id: Subject identifier.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        subject = await self._get_subject(subject_id)

        subject.is_active = False
        deactivated = await self.enrollments.deactivate_for_subject(subject_id)
        await self.db.commit()

        logger.info("Removed subject %s (enrollments deactivated: %d)", subject_id, deactivated)

    async def get_class_roster(self, class_id: str) -> ClassRosterResponse:
        """Get a class with its teacher, active students and active subjects.

        Args:
            class_id: Class identifier.

        Returns:
            Class roster response.

        Raises:
            ClassNotFoundError: If class not found.
        """
        query = (
            select(Class)
            .where(Class.id == class_id)
            .options(
                selectinload(Class.class_teacher),
                selectinload(Class.students),
                selectinload(Class.subjects),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()
        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found", {"class_id": class_id})

        students = [s for s in class_.students if s.is_active]
        subjects = [s for s in class_.subjects if s.is_active]

        return ClassRosterResponse(
            **ClassResponse.model_validate(class_).model_dump(),
            class_teacher=(
                TeacherSummary.model_validate(class_.class_teacher) if class_.class_teacher else None
            ),
            students=[StudentResponse.model_validate(s) for s in students],
            subjects=[SubjectResponse.model_validate(s) for s in subjects],
            student_count=len(students),
        )

    @asynccontextmanager
    async def _conflicts_as(
        self,
        error_class: type[ConflictError],
        message: str,
    ) -> AsyncIterator[None]:
        """Translate an IntegrityError raised inside the block into a conflict."""
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("%s: %s", message, e.orig)
            raise error_class(message, {"reason": str(e.orig)}) from e

    async def _get_class(self, class_id: str, for_update: bool = False) -> Class:
        """Get active class by ID, optionally locking the row.

        Raises:
            ClassNotFoundError: If not found.
        """
        query = select(Class).where(Class.id == class_id, Class.is_active.is_(True))
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found", {"class_id": class_id})

        return class_

    async def _get_teacher(self, teacher_id: str) -> Teacher:
        result = await self.db.execute(
            select(Teacher).where(Teacher.id == teacher_id, Teacher.is_active.is_(True))
        )
        teacher = result.scalar_one_or_none()
        if not teacher:
            raise TeacherNotFoundError(
                f"Teacher {teacher_id} not found", {"teacher_id": teacher_id}
            )
        return teacher

    async def _get_subject(self, subject_id: str) -> Subject:
        result = await self.db.execute(select(Subject).where(Subject.id == subject_id))
        subject = result.scalar_one_or_none()
        if not subject:
            raise SubjectNotFoundError(
                f"Subject {subject_id} not found", {"subject_id": subject_id}
            )
        return subject

    async def _resolve_academic_year(self, academic_year_id: str | None) -> AcademicYear:
        """Get the requested academic year, or the active one.

        Raises:
            AcademicYearNotFoundError: If none matches.
        """
        if academic_year_id:
            query = select(AcademicYear).where(AcademicYear.id == academic_year_id)
        else:
            query = (
                select(AcademicYear)
                .where(AcademicYear.is_active.is_(True))
                .order_by(AcademicYear.created_at.desc())
                .limit(1)
            )
        result = await self.db.execute(query)
        academic_year = result.scalar_one_or_none()

        if not academic_year:
            raise AcademicYearNotFoundError(
                "No active academic year found"
                if academic_year_id is None
                else f"Academic year {academic_year_id} not found",
                {"academic_year_id": academic_year_id},
            )

        return academic_year

    async def _ensure_teacher_available(
        self,
        teacher_id: str,
        exclude_class_id: str | None = None,
    ) -> None:
        """Raise if the teacher is class teacher of another active class."""
        query = select(Class).where(
            Class.class_teacher_id == teacher_id,
            Class.is_active.is_(True),
        )
        if exclude_class_id:
            query = query.where(Class.id != exclude_class_id)
        result = await self.db.execute(query.limit(1))
        other = result.scalar_one_or_none()

        if other:
            raise TeacherAlreadyAssignedError(
                f"Teacher is already class teacher of {other.name}",
                {"teacher_id": teacher_id, "class_id": other.id},
            )

    async def _ensure_subject_unique(
        self,
        class_id: str,
        name: str,
        code: str,
        exclude_id: str | None = None,
    ) -> None:
        """Raise if an active subject of the class has the same name or code."""
        query = select(Subject).where(
            Subject.class_id == class_id,
            Subject.is_active.is_(True),
            or_(Subject.name == name, Subject.code == code),
        )
        if exclude_id:
            query = query.where(Subject.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        clash = result.scalar_one_or_none()

        if clash:
            field = "name" if clash.name == name else "code"
            raise DuplicateSubjectError(
                f"An active subject with this {field} already exists in the class",
                {"field": field, "subject_id": clash.id},
            )

    async def _count_active_students(self, class_id: str) -> int:
        query = select(func.count(Student.id)).where(
            Student.class_id == class_id,
            Student.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return result.scalar() or 0


def _normalize_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Subject name must not be blank", {"field": "name"})
    return name


def _normalize_code(code: str) -> str:
    code = code.strip().upper()
    if not code:
        raise ValidationError("Subject code must not be blank", {"field": "code"})
    return code
