# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    # =========================================================================
    # SCHOOL ORGANISATION
    # =========================================================================

    op.create_table(
        "academic_years",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_academic_years_name"),
    )

    op.create_table(
        "teachers",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column(
            "academic_year_id",
            sa.String(36),
            sa.ForeignKey("academic_years.id", name="fk_teachers_academic_year_id_academic_years"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_teachers_email"),
    )

    op.create_table(
        "classes",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("grade", sa.String(50), nullable=False),
        sa.Column("section", sa.String(20), nullable=True),
        sa.Column("max_students", sa.Integer, nullable=False, server_default="40"),
        sa.Column(
            "academic_year_id",
            sa.String(36),
            sa.ForeignKey("academic_years.id", name="fk_classes_academic_year_id_academic_years"),
            nullable=False,
        ),
        sa.Column(
            "class_teacher_id",
            sa.String(36),
            sa.ForeignKey(
                "teachers.id",
                name="fk_classes_class_teacher_id_teachers",
                ondelete="SET NULL",
            ),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(36), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("academic_year_id", "name", name="uq_classes_year_name"),
    )
    op.create_index("ix_classes_academic_year_id", "classes", ["academic_year_id"])
    # A teacher leads at most one active class
    op.create_index(
        "uq_classes_active_class_teacher",
        "classes",
        ["class_teacher_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active"),
    )

    op.create_table(
        "students",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=True),
        sa.Column("parent_phone", sa.String(50), nullable=True),
        sa.Column(
            "class_id",
            sa.String(36),
            sa.ForeignKey("classes.id", name="fk_students_class_id_classes"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_students_email"),
        sa.UniqueConstraint("class_id", "roll_number", name="uq_students_class_roll_number"),
    )
    op.create_index("ix_students_class_id", "students", ["class_id"])

    # =========================================================================
    # CURRICULUM
    # =========================================================================

    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("icon", sa.String(20), nullable=True),
        sa.Column("color", sa.String(100), nullable=True),
        sa.Column("is_compulsory", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "class_id",
            sa.String(36),
            sa.ForeignKey("classes.id", name="fk_subjects_class_id_classes"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_subjects_class_id", "subjects", ["class_id"])
    op.create_index(
        "uq_subjects_active_class_name",
        "subjects",
        ["class_id", "name"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active"),
    )
    op.create_index(
        "uq_subjects_active_class_code",
        "subjects",
        ["class_id", "code"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active"),
    )

    op.create_table(
        "units",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", name="fk_units_subject_id_subjects"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_units_subject_id", "units", ["subject_id"])

    op.create_table(
        "questions",
        _id(),
        sa.Column("prompt", sa.Text, nullable=False),
        sa.Column("answer_type", sa.String(20), nullable=False, server_default="single_choice"),
        sa.Column("options", sa.JSON, nullable=True),
        sa.Column("correct_answer", sa.JSON, nullable=False),
        sa.Column("explanation", sa.Text, nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("topic", sa.String(100), nullable=True),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", name="fk_questions_subject_id_subjects"),
            nullable=False,
        ),
        sa.Column(
            "unit_id",
            sa.String(36),
            sa.ForeignKey("units.id", name="fk_questions_unit_id_units"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_questions_subject_id", "questions", ["subject_id"])
    op.create_index("ix_questions_unit_id", "questions", ["unit_id"])

    # =========================================================================
    # ASSESSMENT
    # =========================================================================

    op.create_table(
        "test_results",
        _id(),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey(
                "students.id",
                name="fk_test_results_student_id_students",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", name="fk_test_results_subject_id_subjects"),
            nullable=False,
        ),
        sa.Column(
            "unit_id",
            sa.String(36),
            sa.ForeignKey("units.id", name="fk_test_results_unit_id_units"),
            nullable=True,
        ),
        sa.Column(
            "class_id",
            sa.String(36),
            sa.ForeignKey("classes.id", name="fk_test_results_class_id_classes"),
            nullable=True,
        ),
        sa.Column("test_type", sa.String(20), nullable=False),
        sa.Column("score", sa.Float, nullable=False),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("correct_answers", sa.Integer, nullable=False),
        sa.Column("time_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("answers", sa.JSON, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "correct_answers <= total_questions",
            name="ck_test_results_correct_le_total",
        ),
        sa.CheckConstraint("score >= 0 AND score <= 100", name="ck_test_results_score_range"),
    )
    op.create_index("ix_test_results_student_id", "test_results", ["student_id"])
    op.create_index("ix_test_results_subject_id", "test_results", ["subject_id"])
    op.create_index("ix_test_results_created_at", "test_results", ["created_at"])

    op.create_table(
        "progress_records",
        _id(),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey(
                "students.id",
                name="fk_progress_records_student_id_students",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", name="fk_progress_records_subject_id_subjects"),
            nullable=False,
        ),
        sa.Column("total_questions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_questions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("correct_answers", sa.Integer, nullable=False, server_default="0"),
        sa.Column("progress", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "last_studied",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint(
            "student_id", "subject_id", name="uq_progress_records_student_subject"
        ),
        sa.CheckConstraint(
            "progress >= 0 AND progress <= 100",
            name="ck_progress_records_progress_range",
        ),
    )
    op.create_index("ix_progress_records_subject_id", "progress_records", ["subject_id"])

    op.create_table(
        "enrollments",
        _id(),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey(
                "students.id",
                name="fk_enrollments_student_id_students",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", name="fk_enrollments_subject_id_subjects"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("student_id", "subject_id", name="uq_enrollments_student_subject"),
    )
    op.create_index("ix_enrollments_subject_id", "enrollments", ["subject_id"])

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    op.create_table(
        "admin_accounts",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("school_name", sa.String(200), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("permissions", sa.JSON, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_admin_accounts_email"),
    )


def downgrade() -> None:
    """Drop all tables."""
    # Drop in reverse order to handle foreign keys
    op.drop_table("admin_accounts")
    op.drop_table("enrollments")
    op.drop_table("progress_records")
    op.drop_table("test_results")
    op.drop_table("questions")
    op.drop_table("units")
    op.drop_table("subjects")
    op.drop_table("students")
    op.drop_table("classes")
    op.drop_table("teachers")
    op.drop_table("academic_years")
