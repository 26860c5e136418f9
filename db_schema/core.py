# db_schema/core.py
"""SQLite SSOT schema: core league tables.

Tables:
- meta: schema_version / created_at
- profiles: parents and commissioners
- players: kids and coaches (soft-deactivated via is_active, never hard-deleted)
- games: one row per game day (status drives which logs count as history)
- scoring_rules / game_logs: live scoring events (history source for the draft pool ranking)

This module contains *only* DDL and schema migrations.
It must not import LeagueRepo (to avoid circular imports).
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for core tables."""
    return f"""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                INSERT INTO meta(key, value) VALUES ('schema_version', '{schema_version}')
                ON CONFLICT(key) DO UPDATE SET value=excluded.value;

                INSERT OR IGNORE INTO meta(key, value) VALUES ('created_at', '{now}');

                CREATE TABLE IF NOT EXISTS profiles (
                    profile_id TEXT PRIMARY KEY,
                    username TEXT NOT NULL,
                    is_commissioner INTEGER NOT NULL DEFAULT 0,
                    avatar_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS players (
                    player_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL CHECK (type IN ('kid', 'coach')),
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS games (
                    game_id TEXT PRIMARY KEY,
                    opponent_name TEXT NOT NULL,
                    game_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'scheduled'
                        CHECK (status IN ('scheduled', 'drafting', 'live', 'completed')),
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_games_status ON games(status);

                CREATE TABLE IF NOT EXISTS scoring_rules (
                    rule_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    action_name TEXT NOT NULL,
                    position_context TEXT NOT NULL DEFAULT '',
                    points REAL NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1
                );

                CREATE TABLE IF NOT EXISTS game_logs (
                    log_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    game_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    rule_id INTEGER NOT NULL,
                    logged_at TEXT NOT NULL,
                    FOREIGN KEY(game_id) REFERENCES games(game_id) ON DELETE CASCADE,
                    FOREIGN KEY(player_id) REFERENCES players(player_id),
                    FOREIGN KEY(rule_id) REFERENCES scoring_rules(rule_id)
                );

                CREATE INDEX IF NOT EXISTS idx_game_logs_game ON game_logs(game_id);
                CREATE INDEX IF NOT EXISTS idx_game_logs_player ON game_logs(player_id);
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Post-DDL migrations for core tables."""
    # profiles.avatar_url was added after the first release.
    ensure_columns(cur, "profiles", {"avatar_url": "TEXT"})
