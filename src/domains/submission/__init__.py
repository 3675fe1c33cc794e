# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission domain package.

Score a batch of answers, store the test result and update progress.
"""

from src.domains.submission.orchestrator import (
    NoQuestionsResolvedError,
    SubmissionOrchestrator,
    UnknownStudentError,
    UnknownSubjectError,
)

__all__ = [
    "SubmissionOrchestrator",
    "NoQuestionsResolvedError",
    "UnknownStudentError",
    "UnknownSubjectError",
]
