# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Roster domain package.

Administrative mutations of classes, teachers, students and subjects.
"""

from src.domains.roster.service import (
    AcademicYearNotFoundError,
    ClassNameExistsError,
    ClassNotFoundError,
    ClassRosterGuard,
    DuplicateStudentError,
    DuplicateSubjectError,
    InactiveSubjectError,
    StudentNotFoundError,
    TeacherAlreadyAssignedError,
    TeacherNotFoundError,
)

__all__ = [
    "ClassRosterGuard",
    "AcademicYearNotFoundError",
    "ClassNameExistsError",
    "ClassNotFoundError",
    "DuplicateStudentError",
    "DuplicateSubjectError",
    "InactiveSubjectError",
    "StudentNotFoundError",
    "TeacherAlreadyAssignedError",
    "TeacherNotFoundError",
]
