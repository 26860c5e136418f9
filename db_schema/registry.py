# db_schema/registry.py
"""Schema registry + applier.

Applies each module's DDL statement by statement, then its post-DDL migrations.
"""

from __future__ import annotations

import sqlite3
from types import ModuleType
from typing import Callable, Iterable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def apply_all(
    cur: sqlite3.Cursor,
    *,
    modules: Iterable[ModuleType],
    now: str,
    schema_version: str,
    ensure_columns: EnsureColumnsFn,
) -> None:
    """Apply schema modules.

    Steps:
    1) one DDL batch per module (statements split on ';')
    2) run migrate() for modules that define it
    """
    modules = list(modules)
    for m in modules:
        for stmt in _split_statements(m.ddl(now=now, schema_version=schema_version)):
            cur.execute(stmt)

    for m in modules:
        migrate = getattr(m, "migrate", None)
        if migrate is None:
            continue
        migrate(cur, ensure_columns=ensure_columns)


def _split_statements(script: str) -> list[str]:
    # executescript() would COMMIT the caller's open transaction, so statements run one by one.
    # DDL here never embeds ';' inside literals.
    out = []
    for part in script.split(";"):
        lines = [ln for ln in part.splitlines() if ln.strip() and not ln.strip().startswith("--")]
        if lines:
            out.append("\n".join(lines))
    return out
