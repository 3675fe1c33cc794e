# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for test submissions."""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from src.models.common import TestKind, UtcDateTime

# A submitted or correct answer: option text, true/false, or selected options
AnswerValue = Union[StrictStr, StrictBool, list[StrictStr]]


class SubmittedAnswer(BaseModel):
    """One answer inside a submission."""

    model_config = ConfigDict(frozen=True)

    question_id: str = Field(min_length=1, description="Answered question")
    answer: AnswerValue = Field(description="Student-provided value")


class SubmitTestRequest(BaseModel):
    """Body of a test submission."""

    subject_id: str | None = Field(None, description="Subject hint; inferred from questions if absent")
    unit_id: str | None = Field(None, description="Unit the test was taken from")
    test_type: TestKind = Field(TestKind.PRACTICE, description="Kind of test")
    time_spent: int = Field(0, ge=0, description="Time spent in seconds")
    answers: list[SubmittedAnswer] = Field(min_length=1, description="Submitted answers")


class GradedAnswerResponse(BaseModel):
    """Grading of a single answer."""

    question_id: str
    user_answer: AnswerValue
    is_correct: bool
    correct_answer: AnswerValue | None = Field(
        None, description="Withheld when the question could not be resolved"
    )


class TestResultSummary(BaseModel):
    """Outcome returned to the student after a submission."""

    __test__ = False

    id: str
    subject_id: str
    score: float = Field(ge=0, le=100)
    percentage: int = Field(ge=0, le=100)
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    time_spent: int
    answers: list[GradedAnswerResponse]


class TestHistoryItem(BaseModel):
    """A stored test result as listed in the history."""

    __test__ = False

    model_config = ConfigDict(from_attributes=True)

    id: str
    subject_id: str
    unit_id: str | None = None
    test_type: str
    score: float
    total_questions: int
    correct_answers: int
    time_spent: int
    created_at: UtcDateTime


class TestHistoryResponse(BaseModel):
    """Newest-first list of test results."""

    __test__ = False

    items: list[TestHistoryItem]
    total: int
