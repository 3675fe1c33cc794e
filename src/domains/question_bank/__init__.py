# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question bank domain package."""

from src.domains.question_bank.service import QuestionBank

__all__ = ["QuestionBank"]
