# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Practice API endpoints for students.

This module provides endpoints for submitting tests and reading results:
- POST /submissions - Grade a batch of answers and record the result
- GET /history - List past test results, newest first
- GET /progress - List per-subject progress
- POST /enrollments - Enroll in an optional subject of the student's class
- GET /stats - Headline statistics for the home screen

Example:
    POST /api/v1/practice/submissions
    X-User-Id: <student id>
    X-User-Type: student
    {
        "subject_id": "subject-math-10a",
        "test_type": "practice",
        "time_spent": 120,
        "answers": [
            {"question_id": "question-derivative-basic", "answer": "6x + 2"},
            {"question_id": "question-linear-equation", "answer": "x = 3"}
        ]
    }
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_app_settings, get_db, require_student
from src.api.middleware.identity import CurrentUser
from src.core.config import Settings
from src.domains.analytics.service import StatsService
from src.domains.enrollment.service import EnrollmentRegistry
from src.domains.progress.ledger import ProgressLedger
from src.domains.scoring.engine import ScoringEngine
from src.domains.submission.orchestrator import SubmissionOrchestrator
from src.models.analytics import StudentStatsResponse
from src.models.progress import ProgressListResponse, ProgressResponse
from src.models.roster import EnrollmentResponse, SelfEnrollRequest
from src.models.submission import (
    SubmitTestRequest,
    TestHistoryItem,
    TestHistoryResponse,
    TestResultSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_orchestrator(db: AsyncSession, settings: Settings) -> SubmissionOrchestrator:
    """Get submission orchestrator configured from settings."""
    engine = ScoringEngine(
        multi_select_order_sensitive=settings.grading.multi_select_order_sensitive,
    )
    return SubmissionOrchestrator(db=db, scoring_engine=engine)


@router.post(
    "/submissions",
    response_model=TestResultSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Submit test",
    description="Grade a batch of answers, store the result and update progress.",
)
async def submit_test(
    data: SubmitTestRequest,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TestResultSummary:
    """Submit a test for the calling student.

    Args:
        data: Submitted answers and test metadata.
        current_user: Calling student.
        db: Database session.
        settings: Application settings.

    Returns:
        Graded result summary.
    """
    orchestrator = _get_orchestrator(db, settings)
    return await orchestrator.submit(
        current_user.id,
        answers=data.answers,
        subject_id=data.subject_id,
        unit_id=data.unit_id,
        test_type=data.test_type,
        time_spent=data.time_spent,
    )


@router.get(
    "/history",
    response_model=TestHistoryResponse,
    summary="Test history",
    description="List the calling student's test results, newest first.",
)
async def get_test_history(
    subject_id: Annotated[str | None, Query(description="Filter by subject")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum results")] = 10,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TestHistoryResponse:
    """List test results of the calling student."""
    orchestrator = _get_orchestrator(db, settings)
    results = await orchestrator.list_test_history(
        current_user.id,
        subject_id=subject_id,
        limit=limit,
    )
    items = [TestHistoryItem.model_validate(r) for r in results]
    return TestHistoryResponse(items=items, total=len(items))


@router.get(
    "/progress",
    response_model=ProgressListResponse,
    summary="Progress",
    description="List the calling student's progress per subject.",
)
async def get_progress(
    subject_id: Annotated[str | None, Query(description="Filter by subject")] = None,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> ProgressListResponse:
    """List progress records of the calling student."""
    records = await ProgressLedger(db).get_progress(current_user.id, subject_id=subject_id)
    return ProgressListResponse(items=[ProgressResponse.model_validate(r) for r in records])


@router.post(
    "/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in subject",
    description="Enroll the calling student in an optional subject of their class.",
)
async def enroll_in_subject(
    data: SelfEnrollRequest,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    """Take an optional subject.

    Args:
        data: Subject to enroll in.
        current_user: Calling student.
        db: Database session.

    Returns:
        The new enrollment.
    """
    enrollment = await EnrollmentRegistry(db).self_enroll(current_user.id, data.subject_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.get(
    "/stats",
    response_model=StudentStatsResponse,
    summary="Statistics",
    description="Average score, weekly improvement, recent activity and progress.",
)
async def get_stats(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> StudentStatsResponse:
    """Summarize the calling student's results."""
    return await StatsService(db).get_student_stats(current_user.id)
