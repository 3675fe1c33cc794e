# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dialect-specific INSERT constructs.

Upserts (``ON CONFLICT``) are not part of generic SQLAlchemy Core; both
PostgreSQL and SQLite ship an ``insert`` construct exposing
``on_conflict_do_update`` / ``on_conflict_do_nothing`` with the same API.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_name(session: AsyncSession) -> str:
    """Return the dialect name of the engine bound to a session."""
    return session.get_bind().dialect.name


def dialect_insert(session: AsyncSession, model: Any) -> Any:
    """Build an upsert-capable INSERT for the session's backend.

    Args:
        session: Session whose bind decides the dialect.
        model: ORM class or Table to insert into.

    Returns:
        Dialect ``Insert`` construct.

    Raises:
        NotImplementedError: For backends without native upsert support here.
    """
    name = dialect_name(session)
    try:
        insert = _INSERTS[name]
    except KeyError:
        raise NotImplementedError(f"Upsert is not supported for dialect '{name}'") from None
    return insert(model)
