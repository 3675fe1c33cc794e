# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission orchestrator for practice, mock and past-paper tests.

This module provides the SubmissionOrchestrator class, the entry point for
a student submitting a batch of answers:

1. Validate the submission
2. Resolve the student and, in one query, the referenced questions
3. Resolve the subject the result is recorded against
4. Grade the answers
5. Store one TestResult and merge the batch into the progress record

Step 5 runs in one transaction: a failed progress merge also discards the
TestResult, so a retry never double counts.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError, PersistenceError, ValidationError
from src.domains.progress.ledger import ProgressLedger
from src.domains.question_bank.service import QuestionBank
from src.domains.scoring.engine import ScoringEngine
from src.infrastructure.database.models import Question, Student, Subject, TestResult
from src.models.common import TestKind
from src.models.submission import GradedAnswerResponse, SubmitTestRequest, TestResultSummary

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 100


class UnknownStudentError(NotFoundError):
    """Raised when the submitting student does not exist."""


class UnknownSubjectError(NotFoundError):
    """Raised when the subject is missing, removed or outside the student's class."""


class NoQuestionsResolvedError(NotFoundError):
    """Raised when none of the submitted questions could be resolved."""


class SubmissionOrchestrator:
    """Scores submissions and records their outcome.

    Attributes:
        db: Async database session.
        question_bank: Batched question lookup.
        ledger: Progress ledger sharing the session.
        scoring_engine: Grading rules.
    """

    def __init__(
        self,
        db: AsyncSession,
        scoring_engine: ScoringEngine | None = None,
    ) -> None:
        """Initialize submission orchestrator.

        Args:
            db: Async database session.
            scoring_engine: Grading rules; defaults to ordered multi-select.
        """
        self.db = db
        self.question_bank = QuestionBank(db)
        self.ledger = ProgressLedger(db)
        self.scoring_engine = scoring_engine or ScoringEngine()

    async def submit(
        self,
        student_id: str,
        answers: Sequence[Any],
        subject_id: str | None = None,
        unit_id: str | None = None,
        test_type: TestKind | str = TestKind.PRACTICE,
        time_spent: int = 0,
    ) -> TestResultSummary:
        """Grade a submission and record it.

        Args:
            student_id: Submitting student.
            answers: SubmittedAnswer models or ``{"question_id", "answer"}`` dicts.
            subject_id: Subject hint; inferred from the questions when absent.
            unit_id: Unit the test was taken from.
            test_type: Kind of test.
            time_spent: Seconds spent on the test.

        Returns:
            Summary of the stored result.

        Raises:
            ValidationError: If the submission is malformed. Nothing is written.
            NotFoundError: If the student, the subject hint or every question
                is unknown. Nothing is written.
            PersistenceError: If storing the result or the progress fails.
                Nothing is written.
        """
        request = self._validate(
            answers=answers,
            subject_id=subject_id,
            unit_id=unit_id,
            test_type=test_type,
            time_spent=time_spent,
        )

        student = await self._get_student(student_id)

        questions = await self.question_bank.fetch_questions_by_ids(
            answer.question_id for answer in request.answers
        )
        resolved_subject_id = await self._resolve_subject(student, request, questions)
        in_subject = [q for q in questions if q.subject_id == resolved_subject_id]
        if not in_subject:
            raise NoQuestionsResolvedError(
                "None of the submitted questions were found",
                {"subject_id": resolved_subject_id},
            )

        outcome = self.scoring_engine.grade(request.answers, in_subject)

        test_result = TestResult(
            student_id=student_id,
            subject_id=resolved_subject_id,
            unit_id=request.unit_id,
            class_id=student.class_id,
            test_type=request.test_type.value,
            score=outcome.score,
            total_questions=outcome.total_count,
            correct_answers=outcome.correct_count,
            time_spent=request.time_spent,
            answers=[graded.to_dict() for graded in outcome.graded],
        )

        try:
            self.db.add(test_result)
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to store test result for student %s: %s", student_id, e)
            raise PersistenceError("Failed to store test result", e) from e

        # rollback expires loaded rows, keep plain values for logging
        result_id = test_result.id

        try:
            await self.ledger.apply(
                student_id,
                resolved_subject_id,
                outcome.total_count,
                outcome.correct_count,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Progress update failed, test result discarded for reconciliation: "
                "student=%s, subject=%s, result=%s, batch=%d/%d: %s",
                student_id,
                resolved_subject_id,
                result_id,
                outcome.correct_count,
                outcome.total_count,
                e,
            )
            raise PersistenceError(
                "Failed to update progress; the submission was not recorded",
                e,
                {"student_id": student_id, "subject_id": resolved_subject_id},
            ) from e

        logger.info(
            "Recorded %s test %s: student=%s, subject=%s, score=%.1f (%d/%d)",
            request.test_type.value,
            result_id,
            student_id,
            resolved_subject_id,
            outcome.score,
            outcome.correct_count,
            outcome.total_count,
        )

        return TestResultSummary(
            id=result_id,
            subject_id=resolved_subject_id,
            score=outcome.score,
            percentage=outcome.percentage,
            total_questions=outcome.total_count,
            correct_answers=outcome.correct_count,
            incorrect_answers=outcome.incorrect_count,
            time_spent=request.time_spent,
            answers=[GradedAnswerResponse(**graded.to_dict()) for graded in outcome.graded],
        )

    async def list_test_history(
        self,
        student_id: str,
        subject_id: str | None = None,
        limit: int = 10,
    ) -> list[TestResult]:
        """List a student's test results, newest first.

        Args:
            student_id: Student identifier.
            subject_id: Optional subject filter.
            limit: Maximum number of results (1-100).

        Returns:
            Test results.

        Raises:
            ValidationError: If limit is out of range.
        """
        if limit < 1 or limit > MAX_HISTORY_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {MAX_HISTORY_LIMIT}",
                {"limit": limit},
            )

        query = select(TestResult).where(TestResult.student_id == student_id)
        if subject_id:
            query = query.where(TestResult.subject_id == subject_id)
        query = query.order_by(TestResult.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    def _validate(self, **fields: Any) -> SubmitTestRequest:
        """Build the request model, reporting problems as ValidationError."""
        answers = fields["answers"]
        if isinstance(answers, (list, tuple)):
            fields["answers"] = [
                answer.model_dump() if hasattr(answer, "model_dump") else answer
                for answer in answers
            ]
        try:
            return SubmitTestRequest.model_validate(fields)
        except PydanticValidationError as e:
            errors = [
                {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                for err in e.errors()
            ]
            raise ValidationError("Invalid submission", {"errors": errors}) from e

    async def _get_student(self, student_id: str) -> Student:
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.is_active.is_(True))
        )
        student = result.scalar_one_or_none()
        if not student:
            raise UnknownStudentError(f"Student {student_id} not found", {"student_id": student_id})
        return student

    async def _resolve_subject(
        self,
        student: Student,
        request: SubmitTestRequest,
        questions: list[Question],
    ) -> str:
        """Pick the subject the result is recorded against.

        The hint wins when present; otherwise the subject of the first
        answered question that resolved, in submission order. Either way the
        subject must be active and belong to the student's class.

        Raises:
            UnknownSubjectError: If the chosen subject is unknown, removed or
                outside the student's class.
            NoQuestionsResolvedError: If there is no hint and no question resolved.
        """
        if request.subject_id:
            await self._check_class_subject(student, request.subject_id)
            return request.subject_id

        by_id = {question.id: question for question in questions}
        for answer in request.answers:
            question = by_id.get(answer.question_id)
            if question is not None:
                await self._check_class_subject(student, question.subject_id)
                return question.subject_id

        raise NoQuestionsResolvedError(
            "None of the submitted questions were found",
            {"question_ids": [answer.question_id for answer in request.answers]},
        )

    async def _check_class_subject(self, student: Student, subject_id: str) -> None:
        result = await self.db.execute(
            select(Subject.id).where(
                Subject.id == subject_id,
                Subject.class_id == student.class_id,
                Subject.is_active.is_(True),
            )
        )
        if result.scalar_one_or_none() is None:
            raise UnknownSubjectError(
                f"Subject {subject_id} not found for this student",
                {"subject_id": subject_id},
            )
