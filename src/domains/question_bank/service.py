# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question bank lookup.

Read-only access to question definitions. The content itself is authored
elsewhere; this service only resolves identifiers in one batched query.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Question

logger = logging.getLogger(__name__)


class QuestionBank:
    """Batched lookup of questions by identifier.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize question bank.

        Args:
            db: Async database session.
        """
        self.db = db

    async def fetch_questions_by_ids(self, ids: Iterable[str]) -> list[Question]:
        """Fetch the active questions among the given identifiers.

        Missing or inactive identifiers are silently omitted.

        Args:
            ids: Question identifiers; duplicates are allowed.

        Returns:
            Questions found, in no particular order.
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        query = select(Question).where(
            Question.id.in_(unique_ids),
            Question.is_active.is_(True),
        )
        result = await self.db.execute(query)
        questions = list(result.scalars().all())

        if len(questions) < len(unique_ids):
            logger.debug(
                "Resolved %d of %d requested questions",
                len(questions),
                len(unique_ids),
            )

        return questions
