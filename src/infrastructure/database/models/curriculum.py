# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum models: subjects, units and the question bank."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.infrastructure.database.models.school import Class


class Subject(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A subject taught in one class.

    Name and code are unique among the active subjects of the class.
    Deactivation is terminal.
    """

    __tablename__ = "subjects"
    __table_args__ = (
        Index(
            "uq_subjects_active_class_name",
            "class_id",
            "name",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
        Index(
            "uq_subjects_active_class_code",
            "class_id",
            "code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(20), nullable=True)
    color: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_compulsory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classes.id"), nullable=False, index=True
    )

    class_: Mapped[Class] = relationship(back_populates="subjects")
    units: Mapped[list[Unit]] = relationship(back_populates="subject", order_by="Unit.order")


class Unit(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An ordered unit within a subject."""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id"), nullable=False, index=True
    )

    subject: Mapped[Subject] = relationship(back_populates="units")


class Question(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A question with its correct answer.

    ``correct_answer`` holds a string, a boolean or an ordered list of
    option strings depending on ``answer_type``.
    """

    __tablename__ = "questions"

    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    answer_type: Mapped[str] = mapped_column(String(20), nullable=False, default="single_choice")
    options: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    correct_answer: Mapped[Any] = mapped_column(JSON, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    topic: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id"), nullable=False, index=True
    )
    unit_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("units.id"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
