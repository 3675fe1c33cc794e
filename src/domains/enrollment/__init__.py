# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

Idempotent student-subject enrollment edges.
"""

from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    EnrollmentRegistry,
    InactiveStudentError,
    SubjectNotFoundError,
)

__all__ = [
    "AlreadyEnrolledError",
    "EnrollmentRegistry",
    "InactiveStudentError",
    "SubjectNotFoundError",
]
