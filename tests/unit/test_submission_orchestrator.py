# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the submission orchestrator."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from src.core.errors import PersistenceError, ValidationError
from src.domains.progress import ProgressLedger
from src.domains.submission import (
    NoQuestionsResolvedError,
    SubmissionOrchestrator,
    UnknownStudentError,
    UnknownSubjectError,
)
from src.infrastructure.database.models import ProgressRecord, Question, Subject, TestResult
from src.infrastructure.database.seeds.demo import (
    CLASS_ID,
    MATH_SUBJECT_ID,
    PHYSICS_SUBJECT_ID,
    STUDENT_ID,
)
from src.models.common import TestKind

DERIVATIVE = "question-derivative-basic"
LINEAR = "question-linear-equation"
NEWTON = "question-newtons-law"


def _answer(question_id: str, answer) -> dict:
    return {"question_id": question_id, "answer": answer}


async def _count(db_session, model) -> int:
    result = await db_session.execute(select(func.count(model.id)))
    return result.scalar()


class TestSubmit:
    """Tests for grading and recording a submission."""

    @pytest.mark.asyncio
    async def test_grades_and_records_batch(self, db_session, demo) -> None:
        orchestrator = SubmissionOrchestrator(db_session)

        summary = await orchestrator.submit(
            STUDENT_ID,
            [_answer(DERIVATIVE, "6x + 2"), _answer(LINEAR, "x = 3")],
            time_spent=90,
        )

        assert summary.subject_id == MATH_SUBJECT_ID
        assert summary.score == 50.0
        assert summary.percentage == 50
        assert summary.total_questions == 2
        assert summary.correct_answers == 1
        assert summary.incorrect_answers == 1
        assert summary.time_spent == 90
        assert [a.is_correct for a in summary.answers] == [True, False]
        assert summary.answers[1].correct_answer == "x = 4"

        stored = await db_session.get(TestResult, summary.id)
        assert stored.class_id == CLASS_ID
        assert stored.test_type == "practice"
        assert stored.answers[0]["question_id"] == DERIVATIVE

        [progress] = await ProgressLedger(db_session).get_progress(STUDENT_ID)
        assert progress.completed_questions == 2
        assert progress.total_questions == 2
        assert progress.correct_answers == 1
        assert progress.progress == 100.0

    @pytest.mark.asyncio
    async def test_second_batch_accumulates(self, db_session, demo) -> None:
        orchestrator = SubmissionOrchestrator(db_session)

        await orchestrator.submit(STUDENT_ID, [_answer(DERIVATIVE, "6x + 2"), _answer(LINEAR, "x = 3")])
        await orchestrator.submit(
            STUDENT_ID,
            [
                _answer(DERIVATIVE, "6x + 2"),
                _answer(LINEAR, "x = 4"),
                _answer("question-factoring", "(x - 3)²"),
            ],
            test_type=TestKind.MOCK,
        )

        [progress] = await ProgressLedger(db_session).get_progress(STUDENT_ID)
        assert progress.completed_questions == 5
        assert progress.correct_answers == 3
        assert progress.total_questions == 5
        assert progress.progress == 100.0
        assert await _count(db_session, TestResult) == 2

    @pytest.mark.asyncio
    async def test_accepts_answer_models(self, db_session, demo) -> None:
        from src.models.submission import SubmittedAnswer

        summary = await SubmissionOrchestrator(db_session).submit(
            STUDENT_ID,
            [SubmittedAnswer(question_id="question-trigonometry", answer=True)],
        )

        assert summary.correct_answers == 1
        assert summary.score == 100.0

    @pytest.mark.asyncio
    async def test_question_of_other_subject_counts_as_incorrect(self, db_session, demo) -> None:
        summary = await SubmissionOrchestrator(db_session).submit(
            STUDENT_ID,
            [_answer(DERIVATIVE, "6x + 2"), _answer(NEWTON, "F = ma")],
            subject_id=MATH_SUBJECT_ID,
        )

        assert summary.total_questions == 2
        assert summary.correct_answers == 1
        assert summary.answers[1].is_correct is False
        assert summary.answers[1].correct_answer is None

    @pytest.mark.asyncio
    async def test_subject_inferred_from_first_resolved_question(self, db_session, demo) -> None:
        summary = await SubmissionOrchestrator(db_session).submit(
            STUDENT_ID,
            [_answer("question-missing", "x"), _answer(NEWTON, "F = ma"), _answer(DERIVATIVE, "6x + 2")],
        )

        assert summary.subject_id == PHYSICS_SUBJECT_ID
        assert summary.total_questions == 3

    @pytest.mark.asyncio
    async def test_unknown_student(self, db_session, demo) -> None:
        with pytest.raises(UnknownStudentError):
            await SubmissionOrchestrator(db_session).submit("nobody", [_answer(DERIVATIVE, "6x + 2")])

        assert await _count(db_session, TestResult) == 0

    @pytest.mark.asyncio
    async def test_subject_hint_from_another_class(self, db_session, demo, make_class, make_subject) -> None:
        class_ = await make_class()
        subject = await make_subject(class_.id, "Biology", "BIO")

        with pytest.raises(UnknownSubjectError):
            await SubmissionOrchestrator(db_session).submit(
                STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")], subject_id=subject.id
            )

    @pytest.mark.asyncio
    async def test_unknown_subject_hint(self, db_session, demo) -> None:
        with pytest.raises(UnknownSubjectError):
            await SubmissionOrchestrator(db_session).submit(
                STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")], subject_id="missing"
            )

    @pytest.mark.asyncio
    async def test_inferred_subject_from_another_class(
        self, db_session, demo, make_class, make_subject
    ) -> None:
        class_ = await make_class()
        subject = await make_subject(class_.id, "Biology", "BIO")
        db_session.add(
            Question(id="question-cell", prompt="Basic unit of life?", correct_answer="cell", subject_id=subject.id)
        )
        await db_session.commit()

        with pytest.raises(UnknownSubjectError) as exc_info:
            await SubmissionOrchestrator(db_session).submit(
                STUDENT_ID, [_answer("question-cell", "cell"), _answer(DERIVATIVE, "6x + 2")]
            )

        assert exc_info.value.details == {"subject_id": subject.id}
        assert await _count(db_session, TestResult) == 0
        assert await _count(db_session, ProgressRecord) == 0

    @pytest.mark.asyncio
    async def test_removed_subject_hint(self, db_session, demo) -> None:
        physics = await db_session.get(Subject, PHYSICS_SUBJECT_ID)
        physics.is_active = False
        await db_session.commit()

        with pytest.raises(UnknownSubjectError):
            await SubmissionOrchestrator(db_session).submit(
                STUDENT_ID, [_answer(NEWTON, "F = ma")], subject_id=PHYSICS_SUBJECT_ID
            )

        assert await _count(db_session, TestResult) == 0

    @pytest.mark.asyncio
    async def test_removed_subject_inferred(self, db_session, demo) -> None:
        physics = await db_session.get(Subject, PHYSICS_SUBJECT_ID)
        physics.is_active = False
        await db_session.commit()

        with pytest.raises(UnknownSubjectError):
            await SubmissionOrchestrator(db_session).submit(STUDENT_ID, [_answer(NEWTON, "F = ma")])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answers", [None, "6x + 2", {"question_id": DERIVATIVE}])
    async def test_rejects_non_list_answers(self, db_session, demo, answers) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await SubmissionOrchestrator(db_session).submit(STUDENT_ID, answers)

        assert exc_info.value.details["errors"][0]["loc"] == "answers"
        assert await _count(db_session, TestResult) == 0

    @pytest.mark.asyncio
    async def test_no_question_resolved(self, db_session, demo) -> None:
        with pytest.raises(NoQuestionsResolvedError):
            await SubmissionOrchestrator(db_session).submit(STUDENT_ID, [_answer("missing", "a")])

        assert await _count(db_session, TestResult) == 0
        assert await _count(db_session, ProgressRecord) == 0

    @pytest.mark.asyncio
    async def test_no_question_of_hinted_subject(self, db_session, demo) -> None:
        with pytest.raises(NoQuestionsResolvedError):
            await SubmissionOrchestrator(db_session).submit(
                STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")], subject_id=PHYSICS_SUBJECT_ID
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "answers,extra",
        [
            ([], {}),
            ([_answer(DERIVATIVE, 5)], {}),
            ([{"answer": "6x + 2"}], {}),
            ([_answer(DERIVATIVE, "6x + 2")], {"time_spent": -1}),
            ([_answer(DERIVATIVE, "6x + 2")], {"test_type": "quiz"}),
        ],
    )
    async def test_rejects_malformed_submission(self, db_session, demo, answers, extra) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await SubmissionOrchestrator(db_session).submit(STUDENT_ID, answers, **extra)

        assert exc_info.value.details["errors"]
        assert await _count(db_session, TestResult) == 0

    @pytest.mark.asyncio
    async def test_progress_failure_discards_result(self, db_session, demo, monkeypatch) -> None:
        orchestrator = SubmissionOrchestrator(db_session)

        async def failing_apply(*args, **kwargs):
            raise OperationalError("UPDATE progress_records", {}, Exception("database is locked"))

        monkeypatch.setattr(orchestrator.ledger, "apply", failing_apply)

        with pytest.raises(PersistenceError):
            await orchestrator.submit(STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")])

        assert await _count(db_session, TestResult) == 0
        assert await _count(db_session, ProgressRecord) == 0

    @pytest.mark.asyncio
    async def test_result_write_failure(self, db_session, demo, monkeypatch) -> None:
        monkeypatch.setattr(
            db_session,
            "flush",
            AsyncMock(side_effect=OperationalError("INSERT INTO test_results", {}, Exception("disk full"))),
        )

        with pytest.raises(PersistenceError) as exc_info:
            await SubmissionOrchestrator(db_session).submit(STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")])

        assert isinstance(exc_info.value.original_error, OperationalError)


class TestListTestHistory:
    """Tests for the test history."""

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session, demo) -> None:
        orchestrator = SubmissionOrchestrator(db_session)
        first = await orchestrator.submit(STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")])
        second = await orchestrator.submit(STUDENT_ID, [_answer(NEWTON, "F = ma")])

        history = await orchestrator.list_test_history(STUDENT_ID)

        assert [r.id for r in history] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_filters_and_limits(self, db_session, demo) -> None:
        orchestrator = SubmissionOrchestrator(db_session)
        for _ in range(3):
            await orchestrator.submit(STUDENT_ID, [_answer(DERIVATIVE, "6x + 2")])
        await orchestrator.submit(STUDENT_ID, [_answer(NEWTON, "F = ma")])

        math = await orchestrator.list_test_history(STUDENT_ID, subject_id=MATH_SUBJECT_ID, limit=2)

        assert len(math) == 2
        assert all(r.subject_id == MATH_SUBJECT_ID for r in math)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_rejects_limit_out_of_range(self, db_session, demo, limit) -> None:
        with pytest.raises(ValidationError):
            await SubmissionOrchestrator(db_session).list_test_history(STUDENT_ID, limit=limit)
