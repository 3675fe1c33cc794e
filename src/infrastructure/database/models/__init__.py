# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.admin import AdminAccount
from src.infrastructure.database.models.assessment import Enrollment, ProgressRecord, TestResult
from src.infrastructure.database.models.base import Base, generate_uuid
from src.infrastructure.database.models.curriculum import Question, Subject, Unit
from src.infrastructure.database.models.school import AcademicYear, Class, Student, Teacher

__all__ = [
    "Base",
    "generate_uuid",
    # School
    "AcademicYear",
    "Teacher",
    "Class",
    "Student",
    # Curriculum
    "Subject",
    "Unit",
    "Question",
    # Assessment
    "TestResult",
    "ProgressRecord",
    "Enrollment",
    # Admin
    "AdminAccount",
]
