"""
app/repositories/upsert.py

Dialect-native INSERT ... ON CONFLICT builders.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(session: Session, model: Any) -> Any:
    """
    Return an ``insert(model)`` construct that supports
    ``on_conflict_do_update`` for the session's bound dialect.
    """

    dialect_name = session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect_name)
    if insert is None:
        raise RuntimeError(f"Upserts are not supported for dialect '{dialect_name}'.")
    return insert(model)
