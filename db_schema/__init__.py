"""db_schema package.

This package contains the SQLite DDL + migrations used by league_repo.py.

Public API:
- apply_schema(...)
"""

from .init import apply_schema  # noqa: F401

__all__ = ["apply_schema"]
