# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Statistics service for the student home screen and the admin dashboard.

Numbers are computed on read from TestResult, ProgressRecord and the roster
tables; nothing here writes.

Usage:
    from src.domains.analytics import StatsService

    service = StatsService(db=db_session)

    # Student home screen
    stats = await service.get_student_stats(student_id)

    # School-wide counts for the active academic year
    dashboard = await service.get_dashboard_stats()
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.errors import NotFoundError
from src.domains.roster.service import AcademicYearNotFoundError
from src.domains.scoring.engine import round_half_up
from src.infrastructure.database.models import (
    AcademicYear,
    Class,
    Enrollment,
    ProgressRecord,
    Student,
    Subject,
    Teacher,
    TestResult,
)
from src.models.analytics import (
    AcademicYearSummary,
    DashboardClassSummary,
    DashboardStatsResponse,
    RecentActivity,
    StudentStatsResponse,
    SubjectProgress,
)
from src.models.roster import ClassResponse, TeacherSummary
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5
RECENT_CLASSES_LIMIT = 5
WEEK = timedelta(days=7)

_ACTIVITY_LABELS = {
    "practice": "Completed practice",
    "mock": "Took mock test",
    "past_paper": "Took past paper",
}


class StudentNotFoundError(NotFoundError):
    """Raised when the student is missing or inactive."""


def _average(scores: Sequence[float]) -> float:
    return sum(scores) / len(scores) if scores else 0.0


class StatsService:
    """Read-only aggregates over results, progress and roster.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_student_stats(
        self,
        student_id: str,
        now: datetime | None = None,
    ) -> StudentStatsResponse:
        """Summarize a student's results in their current class.

        Results recorded while the student sat in another class are left
        out. The weekly improvement compares the average score of the last
        seven days with the seven days before; an empty week averages 0.

        Args:
            student_id: Student identifier.
            now: Reference time for the weekly windows; defaults to now.

        Returns:
            Student statistics.

        Raises:
            StudentNotFoundError: If the student is missing or inactive.
        """
        now = ensure_utc(now) if now else utc_now()

        result = await self.db.execute(
            select(Student.class_id).where(Student.id == student_id, Student.is_active.is_(True))
        )
        class_id = result.scalar_one_or_none()
        if class_id is None:
            raise StudentNotFoundError(f"Student {student_id} not found", {"student_id": student_id})

        active_subjects = await self.db.scalar(
            select(func.count(Enrollment.id)).where(
                Enrollment.student_id == student_id,
                Enrollment.is_active.is_(True),
            )
        )

        result = await self.db.execute(
            select(TestResult, Subject.name, Subject.icon)
            .join(Subject, Subject.id == TestResult.subject_id)
            .where(TestResult.student_id == student_id, TestResult.class_id == class_id)
            .order_by(TestResult.created_at.desc())
        )
        rows = result.all()

        this_week: list[float] = []
        last_week: list[float] = []
        for test_result, _, _ in rows:
            age = now - ensure_utc(test_result.created_at)
            if age <= WEEK:
                this_week.append(test_result.score)
            elif age <= 2 * WEEK:
                last_week.append(test_result.score)

        recent_activity = [
            RecentActivity(
                id=test_result.id,
                subject_id=test_result.subject_id,
                subject_name=subject_name,
                activity=_ACTIVITY_LABELS.get(test_result.test_type, "Took a test"),
                score=round_half_up(test_result.score),
                time=test_result.created_at,
                icon=icon,
            )
            for test_result, subject_name, icon in rows[:RECENT_ACTIVITY_LIMIT]
        ]

        return StudentStatsResponse(
            active_subjects=active_subjects or 0,
            average_score=round_half_up(_average([row[0].score for row in rows])),
            weekly_improvement=round_half_up(_average(this_week) - _average(last_week)),
            total_tests=len(rows),
            recent_activity=recent_activity,
            progress=await self._subject_progress(student_id, class_id),
        )

    async def get_dashboard_stats(self) -> DashboardStatsResponse:
        """Count classes, teachers, students and subjects of the active year.

        Returns:
            Dashboard statistics with the most recently created classes.

        Raises:
            AcademicYearNotFoundError: If no academic year is active.
        """
        result = await self.db.execute(
            select(AcademicYear)
            .where(AcademicYear.is_active.is_(True))
            .order_by(AcademicYear.created_at.desc())
            .limit(1)
        )
        academic_year = result.scalar_one_or_none()
        if not academic_year:
            raise AcademicYearNotFoundError("No active academic year found")

        active_class_ids = select(Class.id).where(
            Class.academic_year_id == academic_year.id,
            Class.is_active.is_(True),
        )

        total_classes = await self.db.scalar(
            select(func.count()).select_from(active_class_ids.subquery())
        )
        total_teachers = await self.db.scalar(
            select(func.count(Teacher.id)).where(
                Teacher.academic_year_id == academic_year.id,
                Teacher.is_active.is_(True),
            )
        )
        total_students = await self.db.scalar(
            select(func.count(Student.id)).where(
                Student.class_id.in_(active_class_ids),
                Student.is_active.is_(True),
            )
        )
        total_subjects = await self.db.scalar(
            select(func.count(Subject.id)).where(
                Subject.class_id.in_(active_class_ids),
                Subject.is_active.is_(True),
            )
        )

        result = await self.db.execute(
            select(Class)
            .where(Class.academic_year_id == academic_year.id, Class.is_active.is_(True))
            .options(selectinload(Class.class_teacher))
            .order_by(Class.created_at.desc())
            .limit(RECENT_CLASSES_LIMIT)
        )
        recent = list(result.scalars().all())
        recent_ids = [class_.id for class_ in recent]

        student_counts = await self._count_by_class(Student, recent_ids)
        subject_counts = await self._count_by_class(Subject, recent_ids)

        logger.debug(
            "Dashboard for academic year %s: classes=%d, students=%d",
            academic_year.id,
            total_classes or 0,
            total_students or 0,
        )

        return DashboardStatsResponse(
            active_academic_year=AcademicYearSummary.model_validate(academic_year),
            total_classes=total_classes or 0,
            total_teachers=total_teachers or 0,
            total_students=total_students or 0,
            total_subjects=total_subjects or 0,
            recent_classes=[
                DashboardClassSummary(
                    **ClassResponse.model_validate(class_).model_dump(),
                    class_teacher=(
                        TeacherSummary.model_validate(class_.class_teacher)
                        if class_.class_teacher
                        else None
                    ),
                    student_count=student_counts.get(class_.id, 0),
                    subject_count=subject_counts.get(class_.id, 0),
                )
                for class_ in recent
            ],
        )

    async def _subject_progress(self, student_id: str, class_id: str) -> list[SubjectProgress]:
        result = await self.db.execute(
            select(ProgressRecord, Subject)
            .join(Subject, Subject.id == ProgressRecord.subject_id)
            .where(ProgressRecord.student_id == student_id, Subject.class_id == class_id)
            .order_by(ProgressRecord.last_studied.desc())
        )
        return [
            SubjectProgress(
                subject_id=subject.id,
                subject_name=subject.name,
                icon=subject.icon,
                color=subject.color,
                progress=record.progress,
                total_questions=record.total_questions,
                completed_questions=record.completed_questions,
                correct_answers=record.correct_answers,
                last_studied=record.last_studied,
            )
            for record, subject in result.all()
        ]

    async def _count_by_class(
        self,
        model: type[Student] | type[Subject],
        class_ids: list[str],
    ) -> dict[str, int]:
        """Count active rows of a class-owned table per class."""
        if not class_ids:
            return {}
        result = await self.db.execute(
            select(model.class_id, func.count(model.id))
            .where(model.class_id.in_(class_ids), model.is_active.is_(True))
            .group_by(model.class_id)
        )
        return {class_id: count for class_id, count in result.all()}
