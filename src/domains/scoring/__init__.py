# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scoring domain package.

Pure grading of submitted answers against question records.
"""

from src.domains.scoring.engine import (
    GradableQuestion,
    GradedAnswer,
    ScoringEngine,
    ScoringOutcome,
    round_half_up,
    score_percentage,
)

__all__ = [
    "GradableQuestion",
    "GradedAnswer",
    "ScoringEngine",
    "ScoringOutcome",
    "round_half_up",
    "score_percentage",
]
