# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School organisation models: academic years, teachers, classes, students."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.infrastructure.database.models.curriculum import Subject


class AcademicYear(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An academic year; at most one is expected to be active."""

    __tablename__ = "academic_years"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Teacher(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A teacher who may be class teacher of one active class."""

    __tablename__ = "teachers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    academic_year_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("academic_years.id"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Class(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A class/section within an academic year."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("academic_year_id", "name", name="uq_classes_year_name"),
        Index(
            "uq_classes_active_class_teacher",
            "class_teacher_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=40)
    academic_year_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("academic_years.id"), nullable=False, index=True
    )
    class_teacher_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    academic_year: Mapped[AcademicYear] = relationship()
    class_teacher: Mapped[Teacher | None] = relationship()
    students: Mapped[list[Student]] = relationship(
        back_populates="class_",
        order_by="Student.roll_number",
    )
    subjects: Mapped[list[Subject]] = relationship(
        back_populates="class_",
        order_by="Subject.name",
    )


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student belonging to exactly one class."""

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("class_id", "roll_number", name="uq_students_class_roll_number"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    roll_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    parent_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classes.id"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    class_: Mapped[Class] = relationship(back_populates="students")
