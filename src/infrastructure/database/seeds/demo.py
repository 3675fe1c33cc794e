# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Demo seed data.

This module seeds a database with a small, fixed data set:
- One active academic year, one teacher and one class
- A demo student
- Mathematics (compulsory) and Physics subjects with units and questions
- A super admin account

Identifiers are fixed, so running the seed twice leaves the data unchanged.
"""

import asyncio
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.admin.permissions import resolve_permissions
from src.domains.enrollment.service import EnrollmentRegistry
from src.infrastructure.database.models import (
    AcademicYear,
    AdminAccount,
    Base,
    Class,
    Question,
    Student,
    Subject,
    Teacher,
    Unit,
)
from src.models.common import Role
from src.utils.logging import get_logger

logger = get_logger(__name__)

ACADEMIC_YEAR_ID = "academic-year-2025"
TEACHER_ID = "teacher-demo"
CLASS_ID = "class-grade-11-a"
STUDENT_ID = "student-demo"
MATH_SUBJECT_ID = "subject-mathematics"
PHYSICS_SUBJECT_ID = "subject-physics"
ADMIN_ID = "admin-super"

UNITS = [
    {"id": "math-algebra-unit", "name": "Algebra", "order": 1, "subject_id": MATH_SUBJECT_ID},
    {"id": "math-calculus-unit", "name": "Calculus", "order": 2, "subject_id": MATH_SUBJECT_ID},
    {"id": "physics-mechanics-unit", "name": "Mechanics", "order": 1, "subject_id": PHYSICS_SUBJECT_ID},
]

QUESTIONS = [
    {
        "id": "question-derivative-basic",
        "prompt": "What is the derivative of f(x) = 3x² + 2x - 1?",
        "answer_type": "single_choice",
        "options": ["6x + 2", "6x - 2", "3x + 2", "6x² + 2x"],
        "correct_answer": "6x + 2",
        "explanation": "Differentiate term by term: 6x + 2.",
        "difficulty": "medium",
        "topic": "Derivatives",
        "subject_id": MATH_SUBJECT_ID,
        "unit_id": "math-calculus-unit",
    },
    {
        "id": "question-linear-equation",
        "prompt": "Solve for x: 2x + 5 = 13",
        "answer_type": "single_choice",
        "options": ["x = 4", "x = 3", "x = 5", "x = 6"],
        "correct_answer": "x = 4",
        "explanation": "2x = 8, so x = 4.",
        "difficulty": "easy",
        "topic": "Linear Equations",
        "subject_id": MATH_SUBJECT_ID,
        "unit_id": "math-algebra-unit",
    },
    {
        "id": "question-factoring",
        "prompt": "Factor the expression: x² - 9",
        "answer_type": "single_choice",
        "options": ["(x + 3)(x - 3)", "(x - 3)²", "(x + 3)²", "x(x - 9)"],
        "correct_answer": "(x + 3)(x - 3)",
        "explanation": "Difference of squares.",
        "difficulty": "medium",
        "topic": "Factoring",
        "subject_id": MATH_SUBJECT_ID,
        "unit_id": "math-algebra-unit",
    },
    {
        "id": "question-trigonometry",
        "prompt": "True or false: sin(90°) = 1",
        "answer_type": "boolean",
        "options": None,
        "correct_answer": True,
        "explanation": "The sine of a right angle is 1.",
        "difficulty": "easy",
        "topic": "Trigonometry",
        "subject_id": MATH_SUBJECT_ID,
        "unit_id": "math-algebra-unit",
    },
    {
        "id": "question-circle-area",
        "prompt": "What is the area of a circle with radius 5 units?",
        "answer_type": "single_choice",
        "options": ["25π", "10π", "5π", "15π"],
        "correct_answer": "25π",
        "explanation": "πr² = 25π.",
        "difficulty": "easy",
        "topic": "Geometry",
        "subject_id": MATH_SUBJECT_ID,
        "unit_id": "math-algebra-unit",
    },
    {
        "id": "question-newtons-law",
        "prompt": "What is Newton's second law of motion?",
        "answer_type": "single_choice",
        "options": ["F = ma", "F = mv", "F = mv²", "F = m/a"],
        "correct_answer": "F = ma",
        "explanation": "Force equals mass times acceleration.",
        "difficulty": "easy",
        "topic": "Laws of Motion",
        "subject_id": PHYSICS_SUBJECT_ID,
        "unit_id": "physics-mechanics-unit",
    },
    {
        "id": "question-acceleration",
        "prompt": "If a car accelerates from 0 to 60 m/s in 10 seconds, what is its acceleration?",
        "answer_type": "single_choice",
        "options": ["6 m/s²", "60 m/s²", "600 m/s²", "0.6 m/s²"],
        "correct_answer": "6 m/s²",
        "explanation": "a = Δv / t = 60 / 10.",
        "difficulty": "medium",
        "topic": "Kinematics",
        "subject_id": PHYSICS_SUBJECT_ID,
        "unit_id": "physics-mechanics-unit",
    },
]


async def _add_if_missing(session: AsyncSession, model: type[Base], **values: Any) -> Base:
    """Add a row with a fixed id unless it already exists."""
    existing = await session.get(model, values["id"])
    if existing is not None:
        return existing
    instance = model(**values)
    session.add(instance)
    return instance


async def seed_demo_data(session: AsyncSession) -> dict[str, Any]:
    """Seed the demo data set.

    Args:
        session: Database session.

    Returns:
        Dictionary with seeded entities and the number of enrollments created.
    """
    logger.info("demo_seed_started")

    academic_year = await _add_if_missing(
        session, AcademicYear, id=ACADEMIC_YEAR_ID, name="2025-2026", is_active=True
    )
    teacher = await _add_if_missing(
        session,
        Teacher,
        id=TEACHER_ID,
        name="School Teacher",
        email="teacher@edupractice.com",
        academic_year_id=ACADEMIC_YEAR_ID,
    )
    class_ = await _add_if_missing(
        session,
        Class,
        id=CLASS_ID,
        name="Grade 11 - A",
        grade="Grade 11",
        section="A",
        max_students=40,
        academic_year_id=ACADEMIC_YEAR_ID,
        class_teacher_id=TEACHER_ID,
    )
    student = await _add_if_missing(
        session,
        Student,
        id=STUDENT_ID,
        name="Demo Student",
        email="demo@edupractice.com",
        roll_number="1",
        class_id=CLASS_ID,
    )
    subjects = [
        await _add_if_missing(
            session,
            Subject,
            id=MATH_SUBJECT_ID,
            name="Mathematics",
            code="MATH",
            description="Algebra, calculus and geometry",
            icon="📐",
            color="from-blue-500 to-indigo-600",
            is_compulsory=True,
            class_id=CLASS_ID,
        ),
        await _add_if_missing(
            session,
            Subject,
            id=PHYSICS_SUBJECT_ID,
            name="Physics",
            code="PHY",
            description="Mechanics",
            icon="⚛️",
            color="from-purple-500 to-pink-600",
            is_compulsory=False,
            class_id=CLASS_ID,
        ),
    ]
    await session.flush()

    units = [await _add_if_missing(session, Unit, **data) for data in UNITS]
    await session.flush()
    questions = [await _add_if_missing(session, Question, **data) for data in QUESTIONS]

    admin = await _add_if_missing(
        session,
        AdminAccount,
        id=ADMIN_ID,
        name="Super Administrator",
        email="admin@edupractice.com",
        school_name="EduPractice Demo School",
        role=Role.SUPER_ADMIN.value,
        permissions=[p.value for p in resolve_permissions(Role.SUPER_ADMIN)],
    )
    await session.flush()

    enrolled = await EnrollmentRegistry(session).ensure_compulsory_enrollment(CLASS_ID)

    await session.commit()

    logger.info("demo_seed_complete", enrollments_created=enrolled, questions=len(questions))

    return {
        "academic_year": academic_year,
        "teacher": teacher,
        "class": class_,
        "student": student,
        "subjects": subjects,
        "units": units,
        "questions": questions,
        "admin": admin,
        "enrollments_created": enrolled,
    }


if __name__ == "__main__":
    from src.core.config import get_settings
    from src.infrastructure.database.connection import build_engine, build_sessionmaker
    from src.utils.logging import setup_logging

    async def main() -> None:
        settings = get_settings()
        setup_logging(settings)
        engine = build_engine(settings.db.url)
        async with build_sessionmaker(engine)() as session:
            await seed_demo_data(session)
        await engine.dispose()

    asyncio.run(main())
