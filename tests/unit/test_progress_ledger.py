# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the progress ledger."""

import asyncio

import pytest
from sqlalchemy import func, select

from src.core.errors import ValidationError
from src.domains.progress.ledger import (
    ProgressLedger,
    ProgressTotals,
    merge_progress,
    validate_batch,
)
from src.infrastructure.database.connection import build_engine, build_sessionmaker
from src.infrastructure.database.models import Base, ProgressRecord
from src.infrastructure.database.seeds.demo import (
    MATH_SUBJECT_ID,
    PHYSICS_SUBJECT_ID,
    STUDENT_ID,
    seed_demo_data,
)


class TestMergeProgress:
    """Tests for the in-memory merge rule."""

    def test_first_batch(self) -> None:
        totals = merge_progress(None, 2, 1)

        assert totals == ProgressTotals(
            total_questions=2,
            completed_questions=2,
            correct_answers=1,
            progress=100.0,
        )

    def test_second_batch(self) -> None:
        first = merge_progress(None, 2, 1)
        second = merge_progress(first, 3, 2)

        assert second.completed_questions == 5
        assert second.correct_answers == 3
        assert second.total_questions == 5
        assert second.progress == 100.0

    def test_total_larger_than_completed(self) -> None:
        existing = ProgressTotals(
            total_questions=20,
            completed_questions=5,
            correct_answers=3,
            progress=25.0,
        )

        merged = merge_progress(existing, 5, 5)

        assert merged.total_questions == 20
        assert merged.completed_questions == 10
        assert merged.progress == 50.0

    def test_completed_is_monotonic(self) -> None:
        totals = None
        previous = 0
        for batch, correct in [(1, 0), (4, 4), (2, 1), (10, 3)]:
            totals = merge_progress(totals, batch, correct)
            assert totals.completed_questions > previous
            assert 0 <= totals.progress <= 100
            previous = totals.completed_questions


class TestValidateBatch:
    """Tests for batch validation."""

    def test_accepts_valid_batch(self) -> None:
        validate_batch(3, 0)
        validate_batch(3, 3)

    @pytest.mark.parametrize("questions,correct", [(0, 0), (-1, 0), (2, -1), (2, 3)])
    def test_rejects_invalid_batch(self, questions: int, correct: int) -> None:
        with pytest.raises(ValidationError):
            validate_batch(questions, correct)


class TestProgressLedgerApply:
    """Tests for the database upsert."""

    @pytest.mark.asyncio
    async def test_creates_record_on_first_batch(self, db_session, demo) -> None:
        ledger = ProgressLedger(db_session)

        record = await ledger.apply(STUDENT_ID, MATH_SUBJECT_ID, 2, 1)
        await db_session.commit()

        assert record.completed_questions == 2
        assert record.total_questions == 2
        assert record.correct_answers == 1
        assert record.progress == 100.0
        assert record.last_studied is not None

    @pytest.mark.asyncio
    async def test_increments_existing_record(self, db_session, demo) -> None:
        ledger = ProgressLedger(db_session)

        await ledger.apply(STUDENT_ID, MATH_SUBJECT_ID, 2, 1)
        record = await ledger.apply(STUDENT_ID, MATH_SUBJECT_ID, 3, 2)
        await db_session.commit()

        assert record.completed_questions == 5
        assert record.correct_answers == 3
        assert record.total_questions == 5
        assert record.progress == 100.0

        count = await db_session.execute(select(func.count(ProgressRecord.id)))
        assert count.scalar() == 1

    @pytest.mark.asyncio
    async def test_progress_relative_to_larger_total(self, db_session, demo) -> None:
        db_session.add(
            ProgressRecord(
                student_id=STUDENT_ID,
                subject_id=MATH_SUBJECT_ID,
                total_questions=20,
                completed_questions=5,
                correct_answers=3,
                progress=25.0,
            )
        )
        await db_session.commit()

        record = await ProgressLedger(db_session).apply(STUDENT_ID, MATH_SUBJECT_ID, 5, 4)

        assert record.total_questions == 20
        assert record.completed_questions == 10
        assert record.correct_answers == 7
        assert record.progress == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_matches_in_memory_merge(self, db_session, demo) -> None:
        ledger = ProgressLedger(db_session)
        expected = None

        for batch, correct in [(1, 1), (4, 0), (2, 2)]:
            expected = merge_progress(expected, batch, correct)
            record = await ledger.apply(STUDENT_ID, PHYSICS_SUBJECT_ID, batch, correct)

        assert record.total_questions == expected.total_questions
        assert record.completed_questions == expected.completed_questions
        assert record.correct_answers == expected.correct_answers
        assert record.progress == pytest.approx(expected.progress)

    @pytest.mark.asyncio
    async def test_rejects_invalid_batch_without_writing(self, db_session, demo) -> None:
        with pytest.raises(ValidationError):
            await ProgressLedger(db_session).apply(STUDENT_ID, MATH_SUBJECT_ID, 2, 3)

        count = await db_session.execute(select(func.count(ProgressRecord.id)))
        assert count.scalar() == 0


class TestProgressLedgerGetProgress:
    """Tests for listing progress."""

    @pytest.mark.asyncio
    async def test_lists_records_for_student(self, db_session, demo) -> None:
        ledger = ProgressLedger(db_session)
        await ledger.apply(STUDENT_ID, MATH_SUBJECT_ID, 2, 1)
        await ledger.apply(STUDENT_ID, PHYSICS_SUBJECT_ID, 1, 1)
        await db_session.commit()

        records = await ledger.get_progress(STUDENT_ID)

        assert {r.subject_id for r in records} == {MATH_SUBJECT_ID, PHYSICS_SUBJECT_ID}
        assert records[0].last_studied >= records[1].last_studied

    @pytest.mark.asyncio
    async def test_filters_by_subject(self, db_session, demo) -> None:
        ledger = ProgressLedger(db_session)
        await ledger.apply(STUDENT_ID, MATH_SUBJECT_ID, 2, 1)
        await ledger.apply(STUDENT_ID, PHYSICS_SUBJECT_ID, 1, 1)

        records = await ledger.get_progress(STUDENT_ID, subject_id=PHYSICS_SUBJECT_ID)

        assert [r.subject_id for r in records] == [PHYSICS_SUBJECT_ID]

    @pytest.mark.asyncio
    async def test_unknown_student_has_no_progress(self, db_session, demo) -> None:
        assert await ProgressLedger(db_session).get_progress("nobody") == []


class TestProgressLedgerConcurrency:
    """Tests for batches applied from separate connections."""

    @pytest.mark.asyncio
    async def test_concurrent_batches_are_not_lost(self, tmp_path) -> None:
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            sessionmaker = build_sessionmaker(engine)
            async with sessionmaker() as session:
                await seed_demo_data(session)

            async def apply_batch(questions: int, correct: int) -> None:
                async with sessionmaker() as session:
                    await ProgressLedger(session).apply(STUDENT_ID, MATH_SUBJECT_ID, questions, correct)
                    await session.commit()

            await asyncio.gather(apply_batch(3, 2), apply_batch(5, 4), apply_batch(2, 1))

            async with sessionmaker() as session:
                [record] = await ProgressLedger(session).get_progress(STUDENT_ID, MATH_SUBJECT_ID)

            assert record.completed_questions == 10
            assert record.correct_answers == 7
            assert record.total_questions == 10
            assert record.progress == 100.0
        finally:
            await engine.dispose()
