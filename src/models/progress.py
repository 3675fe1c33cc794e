# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response models for progress records."""

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import UtcDateTime


class ProgressResponse(BaseModel):
    """Running counters for one subject."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    subject_id: str
    total_questions: int
    completed_questions: int
    correct_answers: int
    progress: float = Field(ge=0, le=100)
    last_studied: UtcDateTime


class ProgressListResponse(BaseModel):
    """Progress records of a student, most recently studied first."""

    items: list[ProgressResponse]
