# db_schema/init.py
"""Public entrypoint for applying the SQLite schema."""

from __future__ import annotations

import sqlite3
from typing import Iterable

from . import core, draft
from .registry import EnsureColumnsFn, apply_all


# Order matters:
# - core must come first (profiles/players/games are referenced by draft tables)
DEFAULT_MODULES = (
    core,
    draft,
)


def apply_schema(
    cur: sqlite3.Cursor,
    *,
    now: str,
    schema_version: str,
    ensure_columns: EnsureColumnsFn,
    modules: Iterable[object] = DEFAULT_MODULES,
) -> None:
    """Apply the schema and migrations (core -> draft)."""
    apply_all(
        cur,
        modules=modules,  # type: ignore[arg-type]
        now=now,
        schema_version=schema_version,
        ensure_columns=ensure_columns,
    )
