# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Answer grading.

This module provides the ScoringEngine class, a pure function over its
inputs: it receives the submitted answers and the question records that
were already fetched, and never touches the database.

Grading is polymorphic over the representation of the correct answer:
- string: exact string equality
- boolean: exact boolean equality (``1`` never equals ``True``)
- list: ordered, element-wise equality (set equality when configured)

Example:
    >>> engine = ScoringEngine()
    >>> outcome = engine.grade(answers, questions)
    >>> outcome.correct_count, outcome.total_count, outcome.score
    (1, 2, 50.0)
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence

from src.models.submission import SubmittedAnswer


class GradableQuestion(Protocol):
    """Anything carrying an id and a correct answer (ORM Question included)."""

    id: str
    correct_answer: Any


@dataclass(frozen=True)
class GradedAnswer:
    """Graded copy of one submitted answer.

    Attributes:
        question_id: Answered question.
        user_answer: Value submitted by the student.
        is_correct: Grading result.
        correct_answer: Expected value, None when the question was not found.
    """

    question_id: str
    user_answer: Any
    is_correct: bool
    correct_answer: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the embedded TestResult breakdown."""
        return {
            "question_id": self.question_id,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "correct_answer": self.correct_answer,
        }


@dataclass(frozen=True)
class ScoringOutcome:
    """Per-answer grading plus aggregate counts."""

    graded: tuple[GradedAnswer, ...]
    correct_count: int
    total_count: int

    @property
    def incorrect_count(self) -> int:
        return self.total_count - self.correct_count

    @property
    def score(self) -> float:
        return score_percentage(self.correct_count, self.total_count)

    @property
    def percentage(self) -> int:
        return round_half_up(self.score)


def score_percentage(correct: int, total: int) -> float:
    """Return ``100 * correct / total``, or 0 when nothing was answered."""
    if total <= 0:
        return 0.0
    return 100.0 * correct / total


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative percentages."""
    return int(math.floor(value + 0.5))


def _normalize(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_normalize(item) for item in value]
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def _same_value(expected: Any, actual: Any) -> bool:
    # type() rather than isinstance(): bool is a subclass of int
    if type(expected) is not type(actual):
        return False
    if isinstance(expected, list):
        return len(expected) == len(actual) and all(
            _same_value(e, a) for e, a in zip(expected, actual)
        )
    return expected == actual


class ScoringEngine:
    """Grades submitted answers against question records.

    Attributes:
        multi_select_order_sensitive: Compare list answers as ordered
            sequences (default) or as unordered multisets of options.
    """

    def __init__(self, multi_select_order_sensitive: bool = True) -> None:
        self.multi_select_order_sensitive = multi_select_order_sensitive

    def is_correct(self, correct_answer: Any, submitted: Any) -> bool:
        """Decide whether one submitted value matches the correct answer.

        Args:
            correct_answer: Stored correct answer (str, bool or list).
            submitted: Student-provided value.

        Returns:
            True when the values are equal under the grading rule.
        """
        expected = _normalize(correct_answer)
        actual = _normalize(submitted)

        if (
            not self.multi_select_order_sensitive
            and isinstance(expected, list)
            and isinstance(actual, list)
        ):
            if not all(isinstance(item, str) for item in [*expected, *actual]):
                return False
            return Counter(expected) == Counter(actual)

        return _same_value(expected, actual)

    def grade(
        self,
        answers: Sequence[SubmittedAnswer],
        questions: Iterable[GradableQuestion],
    ) -> ScoringOutcome:
        """Grade a batch of answers.

        Answers whose question is missing from ``questions`` are counted in
        the total, graded incorrect, and their correct answer is withheld.

        Args:
            answers: Submitted answers, in submission order.
            questions: Resolved question records.

        Returns:
            ScoringOutcome with graded answers in submission order.
        """
        by_id = {question.id: question for question in questions}

        graded: list[GradedAnswer] = []
        correct_count = 0
        for answer in answers:
            question = by_id.get(answer.question_id)
            if question is None:
                graded.append(
                    GradedAnswer(
                        question_id=answer.question_id,
                        user_answer=answer.answer,
                        is_correct=False,
                    )
                )
                continue

            is_correct = self.is_correct(question.correct_answer, answer.answer)
            if is_correct:
                correct_count += 1
            graded.append(
                GradedAnswer(
                    question_id=answer.question_id,
                    user_answer=answer.answer,
                    is_correct=is_correct,
                    correct_answer=question.correct_answer,
                )
            )

        return ScoringOutcome(
            graded=tuple(graded),
            correct_count=correct_count,
            total_count=len(graded),
        )
