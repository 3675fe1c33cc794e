# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for EduPractice.

Domains:
    scoring: Pure grading of submitted answers.
    question_bank: Batched question lookup.
    progress: Per-(student, subject) progress ledger.
    enrollment: Student-subject enrollment registry.
    roster: Class roster administration and invariants.
    submission: Test submission orchestration.
    admin: Administrator accounts and permissions.
    analytics: Student and dashboard statistics.
"""
