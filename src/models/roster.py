# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for class roster administration."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import UtcDateTime


def _strip_required(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class ClassCreateRequest(BaseModel):
    """Create a class within an academic year."""

    name: str = Field(min_length=1, max_length=100)
    grade: str = Field(min_length=1, max_length=50)
    section: str | None = Field(None, max_length=20)
    max_students: int | None = Field(None, ge=1, description="Defaults to the configured capacity")
    academic_year_id: str | None = Field(None, description="Defaults to the active academic year")
    class_teacher_id: str | None = None

    @field_validator("name", "grade")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _strip_required(value)


class StudentCreateRequest(BaseModel):
    """Add a student to a class."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    roll_number: str | None = Field(None, max_length=50, pattern=r"^[A-Za-z0-9]+$")
    parent_phone: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AssignTeacherRequest(BaseModel):
    """Make a teacher the class teacher of a class."""

    teacher_id: str = Field(min_length=1)


class SubjectCreateRequest(BaseModel):
    """Add a subject to a class."""

    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    description: str | None = None
    icon: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=100)
    is_compulsory: bool = False

    @field_validator("name", "code")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _strip_required(value)


class SubjectUpdateRequest(BaseModel):
    """Partial subject update; unset fields are left untouched."""

    name: str | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, min_length=1, max_length=20)
    description: str | None = None
    icon: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=100)
    is_compulsory: bool | None = None

    @field_validator("name", "code")
    @classmethod
    def strip_required(cls, value: str | None) -> str | None:
        return _strip_required(value)


class TeacherSummary(BaseModel):
    """Teacher as shown on a class."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class StudentResponse(BaseModel):
    """A student on a class roster."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    roll_number: str | None = None
    parent_phone: str | None = None
    class_id: str
    is_active: bool
    created_at: UtcDateTime


class SubjectResponse(BaseModel):
    """A subject of a class."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    is_compulsory: bool
    is_active: bool
    class_id: str


class ClassResponse(BaseModel):
    """A class without its roster."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    grade: str
    section: str | None = None
    max_students: int
    academic_year_id: str
    class_teacher_id: str | None = None
    is_active: bool
    created_at: UtcDateTime


class ClassRosterResponse(ClassResponse):
    """A class with its teacher, students and active subjects."""

    class_teacher: TeacherSummary | None = None
    students: list[StudentResponse] = Field(default_factory=list)
    subjects: list[SubjectResponse] = Field(default_factory=list)
    student_count: int = 0


class EnrollStudentsRequest(BaseModel):
    """Explicitly enroll students in a subject."""

    student_ids: list[str] = Field(min_length=1)


class BulkEnrollmentResult(BaseModel):
    """Outcome of an explicit bulk enrollment."""

    successful: int
    already_enrolled: int
    not_found: list[str] = Field(default_factory=list)
    total: int


class SelfEnrollRequest(BaseModel):
    """A student's request to take an optional subject."""

    subject_id: str = Field(min_length=1)


class EnrollmentResponse(BaseModel):
    """One enrollment edge."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    subject_id: str
    is_active: bool
    enrolled_at: UtcDateTime


class EnrollmentListResponse(BaseModel):
    """Enrollments of a subject."""

    items: list[EnrollmentResponse]
    total: int
