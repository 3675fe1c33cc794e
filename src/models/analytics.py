# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response models for student and administrator dashboards."""

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import UtcDateTime
from src.models.roster import ClassResponse, TeacherSummary


class RecentActivity(BaseModel):
    """One of the latest test results of a student."""

    id: str
    subject_id: str
    subject_name: str
    activity: str
    score: int
    time: UtcDateTime
    icon: str | None = None


class SubjectProgress(BaseModel):
    """Progress counters of one subject, with the subject's display fields."""

    subject_id: str
    subject_name: str
    icon: str | None = None
    color: str | None = None
    progress: float = Field(ge=0, le=100)
    total_questions: int
    completed_questions: int
    correct_answers: int
    last_studied: UtcDateTime


class StudentStatsResponse(BaseModel):
    """Headline numbers for a student's home screen."""

    active_subjects: int
    average_score: int
    weekly_improvement: int = Field(description="Last 7 days average minus the 7 days before")
    total_tests: int
    recent_activity: list[RecentActivity] = Field(default_factory=list)
    progress: list[SubjectProgress] = Field(default_factory=list)


class AcademicYearSummary(BaseModel):
    """Academic year as shown on the dashboard."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class DashboardClassSummary(ClassResponse):
    """A recently created class with its head counts."""

    class_teacher: TeacherSummary | None = None
    student_count: int = 0
    subject_count: int = 0


class DashboardStatsResponse(BaseModel):
    """School-wide counts for the active academic year."""

    active_academic_year: AcademicYearSummary
    total_classes: int
    total_teachers: int
    total_students: int
    total_subjects: int
    recent_classes: list[DashboardClassSummary] = Field(default_factory=list)
