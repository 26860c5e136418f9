"""SQLite SSOT schema: draft tables.

This module contains only DDL (and optional migrations) for the draft subsystem.

Tables:
- game_attendance: (game, player) membership; defines the draftable pool of a game
- parent_player_restrictions: (parent, player) pairs a parent may never draft
- game_draft_order: per-game (profile, pick_order); pick_order dense from 1
- draft_picks: append-only pick log (SSOT for the snake draft turn engine)

Design notes:
- draft_picks is the only table the draft engine writes. Turn/round state is never stored;
  it is re-projected from the ordered pick log on every read.
- UNIQUE(game_id, player_id) is the arbiter for concurrent double-picks: a losing insert
  fails with IntegrityError instead of the application locking anything.
- UNIQUE(game_id, pick_number) keeps the global pick sequence free of duplicates.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for draft tables."""
    _ = (now, schema_version)
    return """
                CREATE TABLE IF NOT EXISTS game_attendance (
                    game_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    PRIMARY KEY (game_id, player_id),
                    FOREIGN KEY(game_id) REFERENCES games(game_id) ON DELETE CASCADE,
                    FOREIGN KEY(player_id) REFERENCES players(player_id)
                );

                CREATE TABLE IF NOT EXISTS parent_player_restrictions (
                    parent_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    PRIMARY KEY (parent_id, player_id),
                    FOREIGN KEY(parent_id) REFERENCES profiles(profile_id) ON DELETE CASCADE,
                    FOREIGN KEY(player_id) REFERENCES players(player_id)
                );

                CREATE TABLE IF NOT EXISTS game_draft_order (
                    game_id TEXT NOT NULL,
                    profile_id TEXT NOT NULL,
                    pick_order INTEGER NOT NULL CHECK (pick_order >= 1),
                    PRIMARY KEY (game_id, profile_id),
                    FOREIGN KEY(game_id) REFERENCES games(game_id) ON DELETE CASCADE,
                    FOREIGN KEY(profile_id) REFERENCES profiles(profile_id)
                );

                CREATE UNIQUE INDEX IF NOT EXISTS uq_game_draft_order_slot
                    ON game_draft_order(game_id, pick_order);

                -- Append-only pick log
                CREATE TABLE IF NOT EXISTS draft_picks (
                    pick_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    game_id TEXT NOT NULL,
                    picked_by_profile_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    round_number INTEGER NOT NULL CHECK (round_number >= 1),
                    pick_number INTEGER NOT NULL CHECK (pick_number >= 1),
                    source TEXT NOT NULL DEFAULT 'draft_user',
                    entered_by_profile_id TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(game_id) REFERENCES games(game_id) ON DELETE CASCADE,
                    FOREIGN KEY(picked_by_profile_id) REFERENCES profiles(profile_id),
                    FOREIGN KEY(player_id) REFERENCES players(player_id)
                );

                -- A player can be drafted at most once per game
                CREATE UNIQUE INDEX IF NOT EXISTS uq_draft_picks_game_player
                    ON draft_picks(game_id, player_id);

                -- Global pick sequence per game has no duplicates
                CREATE UNIQUE INDEX IF NOT EXISTS uq_draft_picks_game_pick_number
                    ON draft_picks(game_id, pick_number);
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Post-DDL migrations for draft tables."""
    # Audit columns were added after the first release (older DBs only have the core pick fields).
    ensure_columns(
        cur,
        "draft_picks",
        {
            "source": "TEXT NOT NULL DEFAULT 'draft_user'",
            "entered_by_profile_id": "TEXT",
        },
    )
