# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress ledger for per-(student, subject) mastery counters.

This module provides the ProgressLedger class, which merges the result of
one graded batch into the running ProgressRecord of a student for a subject.

The merge is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement whose
SET clause is written in terms of the stored row, so two concurrent
submissions for the same pair can never both read the old totals.

Merge rule:
- First batch: completed = total = batch size, correct = batch correct,
  progress = 100 (100% of what has been attempted so far).
- Later batches: completed += batch, correct += batch correct,
  total = max(total, completed), progress = min(100, 100 * completed / total).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Float, case, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ValidationError
from src.infrastructure.database.dialect import dialect_insert
from src.infrastructure.database.models import ProgressRecord, generate_uuid
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

FIRST_BATCH_PROGRESS = 100.0
MAX_PROGRESS = 100.0


@dataclass(frozen=True)
class ProgressTotals:
    """In-memory view of a progress record's counters."""

    total_questions: int
    completed_questions: int
    correct_answers: int
    progress: float


def merge_progress(
    existing: ProgressTotals | None,
    questions_in_batch: int,
    correct_in_batch: int,
) -> ProgressTotals:
    """Apply one batch to counters, mirroring the SQL upsert.

    Args:
        existing: Current counters, or None for the first batch.
        questions_in_batch: Questions answered in the batch.
        correct_in_batch: Correct answers in the batch.

    Returns:
        The merged counters.
    """
    if existing is None:
        return ProgressTotals(
            total_questions=questions_in_batch,
            completed_questions=questions_in_batch,
            correct_answers=correct_in_batch,
            progress=FIRST_BATCH_PROGRESS,
        )

    completed = existing.completed_questions + questions_in_batch
    total = max(existing.total_questions, completed)
    return ProgressTotals(
        total_questions=total,
        completed_questions=completed,
        correct_answers=existing.correct_answers + correct_in_batch,
        progress=min(MAX_PROGRESS, 100.0 * completed / total),
    )


def validate_batch(questions_in_batch: int, correct_in_batch: int) -> None:
    """Reject batches that would break the ledger invariants.

    Raises:
        ValidationError: If the batch is empty or the counts are inconsistent.
    """
    if questions_in_batch < 1:
        raise ValidationError(
            "A progress batch must contain at least one question",
            {"questions_in_batch": questions_in_batch},
        )
    if correct_in_batch < 0 or correct_in_batch > questions_in_batch:
        raise ValidationError(
            "Correct answers must be between 0 and the number of questions",
            {"questions_in_batch": questions_in_batch, "correct_in_batch": correct_in_batch},
        )


class ProgressLedger:
    """Maintains one running ProgressRecord per (student, subject).

    The ledger never commits; the caller owns the transaction so that the
    TestResult insert and the progress merge land together.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize progress ledger.

        Args:
            db: Async database session.
        """
        self.db = db

    async def apply(
        self,
        student_id: str,
        subject_id: str,
        questions_in_batch: int,
        correct_in_batch: int,
    ) -> ProgressRecord:
        """Merge a graded batch into the student's progress for a subject.

        Args:
            student_id: Student identifier.
            subject_id: Subject identifier.
            questions_in_batch: Questions answered in this batch.
            correct_in_batch: Correct answers in this batch.

        Returns:
            The created or updated ProgressRecord.

        Raises:
            ValidationError: If the batch counts are invalid.
        """
        validate_batch(questions_in_batch, correct_in_batch)

        insert_stmt = dialect_insert(self.db, ProgressRecord).values(
            id=generate_uuid(),
            student_id=student_id,
            subject_id=subject_id,
            total_questions=questions_in_batch,
            completed_questions=questions_in_batch,
            correct_answers=correct_in_batch,
            progress=FIRST_BATCH_PROGRESS,
            last_studied=utc_now(),
        )

        # SET expressions see the stored row, not the values being inserted
        stored = ProgressRecord.__table__.c
        excluded = insert_stmt.excluded
        completed = stored.completed_questions + excluded.completed_questions
        total = case(
            (completed > stored.total_questions, completed),
            else_=stored.total_questions,
        )
        ratio = cast(completed, Float) * 100.0 / total
        progress = case((ratio > MAX_PROGRESS, MAX_PROGRESS), else_=ratio)

        stmt = insert_stmt.on_conflict_do_update(
            index_elements=[stored.student_id, stored.subject_id],
            set_={
                "completed_questions": completed,
                "correct_answers": stored.correct_answers + excluded.correct_answers,
                "total_questions": total,
                "progress": progress,
                "last_studied": excluded.last_studied,
            },
        ).returning(ProgressRecord)

        result = await self.db.execute(
            stmt,
            execution_options={"populate_existing": True},
        )
        record = result.scalar_one()

        logger.info(
            "Applied progress batch: student=%s, subject=%s, batch=%d/%d, completed=%d, progress=%.1f",
            student_id,
            subject_id,
            correct_in_batch,
            questions_in_batch,
            record.completed_questions,
            record.progress,
        )

        return record

    async def get_progress(
        self,
        student_id: str,
        subject_id: str | None = None,
    ) -> list[ProgressRecord]:
        """List a student's progress records, most recently studied first.

        Args:
            student_id: Student identifier.
            subject_id: Optional subject filter.

        Returns:
            Matching progress records.
        """
        query = select(ProgressRecord).where(ProgressRecord.student_id == student_id)
        if subject_id:
            query = query.where(ProgressRecord.subject_id == subject_id)
        query = query.order_by(ProgressRecord.last_studied.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())
