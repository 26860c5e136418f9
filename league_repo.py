# league_repo.py
# Developer note:
# - SQLite DB is the single source of truth (SSOT) for persisted league data (tables managed here).
# - The draft engine never caches turn/pool state; it re-reads through LeagueRepo on every view.
# - profile_id / player_id / game_id are canonical strings (see schema.py normalization helpers).
"""
LeagueRepository: persisted-data SSOT (SQLite)

Goal:
- All persisted league-data reads/writes go through SQLite (via LeagueRepo).
- draft_picks is append-only; inserts publish a change event once the enclosing
  transaction commits (see draft.live.DraftChangeFeed).

Usage (CLI):
  python league_repo.py init --db <db_path>
  python league_repo.py import_players --db <db_path> --file players.csv
  python league_repo.py validate --db <db_path>

Python:
  from league_repo import LeagueRepo
  repo = LeagueRepo("<db_path>")
  repo.init_db()
  picks = repo.list_draft_picks("<game_id>")
"""

from __future__ import annotations

import argparse
import contextlib
import datetime as _dt
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import config
from schema import (
    PICK_SOURCES,
    PICK_SOURCE_USER,
    SCHEMA_VERSION,
    assert_unique_ids,
    normalize_game_id,
    normalize_game_status,
    normalize_player_id,
    normalize_player_type,
    normalize_profile_id,
)


# ----------------------------
# Helpers
# ----------------------------

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *, limit: int = 5) -> None:
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


def _utc_now_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    s = str(value).strip().lower()
    return s in {"1", "true", "yes", "y", "t"}


def _require_columns(cols: Sequence[str], required: Sequence[str]) -> None:
    missing = [c for c in required if c not in cols]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Found: {list(cols)}")


class StoreConflictError(Exception):
    """A uniqueness constraint rejected a write.

    `constraint` names the violated key, e.g. "draft_picks(game_id, player_id)".
    """

    def __init__(self, constraint: str, message: str) -> None:
        super().__init__(message)
        self.constraint = constraint


_DRAFT_PICK_UNIQUE_KEYS = {
    "draft_picks.game_id, draft_picks.player_id": "draft_picks(game_id, player_id)",
    "draft_picks.game_id, draft_picks.pick_number": "draft_picks(game_id, pick_number)",
}


def _classify_integrity_error(exc: sqlite3.IntegrityError) -> Optional[str]:
    msg = str(exc)
    if "UNIQUE constraint failed" not in msg:
        return None
    for needle, name in _DRAFT_PICK_UNIQUE_KEYS.items():
        if needle in msg:
            return name
    return msg.split(":", 1)[-1].strip() or "unique"


# ----------------------------
# Repository
# ----------------------------

class LeagueRepo:
    def __init__(
        self,
        db_path: str | Path,
        *,
        change_feed: Any = None,
        busy_timeout_s: Optional[float] = None,
    ):
        self.db_path = str(db_path)
        timeout = config.DB_BUSY_TIMEOUT_S if busy_timeout_s is None else float(busy_timeout_s)
        # isolation_level=None: transactions are issued explicitly (BEGIN / BEGIN IMMEDIATE).
        self._conn = sqlite3.connect(self.db_path, timeout=timeout, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute("PRAGMA journal_mode = WAL;")
        # Nested transaction support (SAVEPOINT) for callers that compose repo methods.
        self._savepoint_seq = 0
        # Insert notifications are held until the outermost transaction commits.
        self._change_feed = change_feed
        self._pending_events: List[Dict[str, Any]] = []

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            pass

    @contextlib.contextmanager
    def transaction(self, *, immediate: bool = False):
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN [IMMEDIATE] ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)

        immediate=True takes the write lock up front so that a read-check-insert
        sequence observes the latest committed pick log.
        """
        cur = self._conn.cursor()
        nested = bool(self._conn.in_transaction)
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                self._conn.execute("BEGIN IMMEDIATE;" if immediate else "BEGIN;")

            yield cur

            if nested and sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.execute("COMMIT;")
                self._flush_pending_events()
        except Exception:
            if nested and sp_name:
                # Roll back to the savepoint only; do NOT rollback the outer transaction here.
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK;")
                self._pending_events.clear()
            raise
        finally:
            try:
                cur.close()
            except sqlite3.Error:
                pass

    def _flush_pending_events(self) -> None:
        events, self._pending_events = self._pending_events, []
        if self._change_feed is None:
            return
        for ev in events:
            self._change_feed.publish_insert(ev["table"], ev["game_id"], row_id=ev.get("row_id"))

    def _queue_insert_event(self, table: str, game_id: str, row_id: Any) -> None:
        # Flushed by the outermost transaction() on COMMIT, dropped on ROLLBACK.
        self._pending_events.append({"table": table, "game_id": game_id, "row_id": row_id})

    # ------------------------
    # Schema
    # ------------------------

    def _ensure_table_columns(self, cur: sqlite3.Cursor, table: str, columns: Mapping[str, str]) -> None:
        """SQLite has no ADD COLUMN IF NOT EXISTS, so check PRAGMA table_info first."""
        rows = cur.execute(f"PRAGMA table_info({table});").fetchall()
        existing = {r["name"] for r in rows}
        for col, ddl in columns.items():
            if col in existing:
                continue
            cur.execute(f"ALTER TABLE {table} ADD COLUMN {col} {ddl};")

    def init_db(self) -> None:
        """Apply SQLite schema (DDL + migrations) via db_schema."""
        from db_schema import apply_schema

        now = _utc_now_iso()
        with self.transaction() as cur:
            apply_schema(
                cur,
                now=now,
                schema_version=SCHEMA_VERSION,
                ensure_columns=self._ensure_table_columns,
            )

    # ------------------------
    # Reference data (game setup / roster)
    # ------------------------

    def upsert_profile(self, profile_id: str, username: str, *, is_commissioner: bool = False,
                       avatar_url: Optional[str] = None) -> None:
        pid = normalize_profile_id(profile_id)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO profiles(profile_id, username, is_commissioner, avatar_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(profile_id) DO UPDATE SET
                    username=excluded.username,
                    is_commissioner=excluded.is_commissioner,
                    avatar_url=excluded.avatar_url,
                    updated_at=excluded.updated_at;
                """,
                (pid, str(username), 1 if is_commissioner else 0, avatar_url, now, now),
            )

    def upsert_player(self, player_id: str, name: str, *, type: str = "kid", is_active: bool = True) -> None:
        pid = normalize_player_id(player_id)
        ptype = normalize_player_type(type)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO players(player_id, name, type, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                    name=excluded.name,
                    type=excluded.type,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at;
                """,
                (pid, str(name).strip(), ptype, 1 if is_active else 0, now, now),
            )

    def deactivate_player(self, player_id: str) -> None:
        """Soft-delete: players are never removed (picks and logs keep referencing them)."""
        pid = normalize_player_id(player_id)
        with self.transaction() as cur:
            cur.execute(
                "UPDATE players SET is_active=0, updated_at=? WHERE player_id=?;",
                (_utc_now_iso(), pid),
            )

    def upsert_game(self, game_id: str, *, opponent_name: str, game_date: str, status: str = "scheduled") -> None:
        gid = normalize_game_id(game_id)
        st = normalize_game_status(status)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO games(game_id, opponent_name, game_date, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(game_id) DO UPDATE SET
                    opponent_name=excluded.opponent_name,
                    game_date=excluded.game_date,
                    status=excluded.status,
                    updated_at=excluded.updated_at;
                """,
                (gid, str(opponent_name), str(game_date)[:10], st, now, now),
            )

    def set_game_status(self, game_id: str, status: str) -> None:
        gid = normalize_game_id(game_id)
        st = normalize_game_status(status)
        with self.transaction() as cur:
            cur.execute("UPDATE games SET status=?, updated_at=? WHERE game_id=?;", (st, _utc_now_iso(), gid))
            if cur.rowcount == 0:
                raise ValueError(f"game not found: {gid}")

    def set_game_attendance(self, game_id: str, player_ids: Iterable[str]) -> None:
        """Replace the attendance pool of a game (game setup step)."""
        gid = normalize_game_id(game_id)
        pids = [normalize_player_id(p) for p in player_ids]
        assert_unique_ids(pids, what="player_id (attendance)")
        with self.transaction() as cur:
            cur.execute("DELETE FROM game_attendance WHERE game_id=?;", (gid,))
            cur.executemany(
                "INSERT INTO game_attendance(game_id, player_id) VALUES (?, ?);",
                [(gid, p) for p in pids],
            )

    def add_restriction(self, parent_id: str, player_id: str) -> None:
        with self.transaction() as cur:
            cur.execute(
                "INSERT OR IGNORE INTO parent_player_restrictions(parent_id, player_id) VALUES (?, ?);",
                (normalize_profile_id(parent_id), normalize_player_id(player_id)),
            )

    def set_draft_order(self, game_id: str, profile_ids: Sequence[str]) -> None:
        """Set the draft order of a game: profile_ids[i] gets pick_order i+1 (dense from 1).

        The order is immutable once picks exist.
        """
        gid = normalize_game_id(game_id)
        pids = [normalize_profile_id(p) for p in profile_ids]
        assert_unique_ids(pids, what="profile_id (draft order)")
        with self.transaction() as cur:
            has_picks = cur.execute("SELECT 1 FROM draft_picks WHERE game_id=? LIMIT 1;", (gid,)).fetchone()
            if has_picks:
                raise ValueError(f"draft order is locked once drafting has started (game_id={gid})")
            cur.execute("DELETE FROM game_draft_order WHERE game_id=?;", (gid,))
            cur.executemany(
                "INSERT INTO game_draft_order(game_id, profile_id, pick_order) VALUES (?, ?, ?);",
                [(gid, p, i) for i, p in enumerate(pids, start=1)],
            )

    def add_scoring_rule(self, action_name: str, points: float, *, position_context: str = "",
                         is_active: bool = True) -> int:
        with self.transaction() as cur:
            cur.execute(
                "INSERT INTO scoring_rules(action_name, position_context, points, is_active) VALUES (?, ?, ?, ?);",
                (str(action_name), str(position_context or ""), float(points), 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def insert_game_log(self, game_id: str, player_id: str, rule_id: int, *, logged_at: Optional[str] = None) -> int:
        gid = normalize_game_id(game_id)
        with self.transaction() as cur:
            cur.execute(
                "INSERT INTO game_logs(game_id, player_id, rule_id, logged_at) VALUES (?, ?, ?, ?);",
                (gid, normalize_player_id(player_id), int(rule_id), logged_at or _utc_now_iso()),
            )
            row_id = int(cur.lastrowid)
        return row_id

    def delete_game_logs(self, game_id: str, *, log_ids: Optional[Iterable[int]] = None) -> int:
        """Delete scoring log entries of a game (log-correction tooling). Returns rows deleted."""
        gid = normalize_game_id(game_id)
        with self.transaction() as cur:
            if log_ids is None:
                cur.execute("DELETE FROM game_logs WHERE game_id=?;", (gid,))
            else:
                ids = [int(x) for x in log_ids]
                if not ids:
                    return 0
                marks = ",".join("?" for _ in ids)
                cur.execute(f"DELETE FROM game_logs WHERE game_id=? AND log_id IN ({marks});", (gid, *ids))
            return int(cur.rowcount)

    # ------------------------
    # Reads
    # ------------------------

    def get_game(self, game_id: str) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(
            "SELECT game_id, opponent_name, game_date, status FROM games WHERE game_id=?;",
            (normalize_game_id(game_id),),
        ).fetchone()
        return dict(row) if row else None

    def get_profile(self, profile_id: str) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(
            "SELECT profile_id, username, is_commissioner, avatar_url FROM profiles WHERE profile_id=?;",
            (normalize_profile_id(profile_id),),
        ).fetchone()
        if not row:
            return None
        d = dict(row)
        d["is_commissioner"] = bool(d["is_commissioner"])
        return d

    def get_usernames(self, profile_ids: Iterable[str]) -> Dict[str, str]:
        ids = sorted({str(p) for p in profile_ids if p})
        if not ids:
            return {}
        marks = ",".join("?" for _ in ids)
        rows = self._conn.execute(
            f"SELECT profile_id, username FROM profiles WHERE profile_id IN ({marks});", ids
        ).fetchall()
        return {str(r["profile_id"]): str(r["username"]) for r in rows}

    def list_game_attendance(self, game_id: str) -> List[Dict[str, Any]]:
        """Attending players of a game joined with player rows, ordered by name."""
        rows = self._conn.execute(
            """
            SELECT p.player_id, p.name, p.type, p.is_active
            FROM game_attendance a
            JOIN players p ON p.player_id = a.player_id
            WHERE a.game_id = ?
            ORDER BY p.name COLLATE NOCASE ASC, p.player_id ASC;
            """,
            (normalize_game_id(game_id),),
        ).fetchall()
        return [dict(r) for r in rows]

    def is_player_attending(self, game_id: str, player_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM game_attendance WHERE game_id=? AND player_id=?;",
            (normalize_game_id(game_id), normalize_player_id(player_id)),
        ).fetchone()
        return row is not None

    def list_draft_order(self, game_id: str) -> List[Dict[str, Any]]:
        rows = self._conn.execute(
            "SELECT game_id, profile_id, pick_order FROM game_draft_order WHERE game_id=? ORDER BY pick_order ASC;",
            (normalize_game_id(game_id),),
        ).fetchall()
        return [dict(r) for r in rows]

    def list_draft_picks(self, game_id: str) -> List[Dict[str, Any]]:
        rows = self._conn.execute(
            """
            SELECT pick_id, game_id, picked_by_profile_id, player_id, round_number, pick_number,
                   source, entered_by_profile_id, created_at
            FROM draft_picks
            WHERE game_id = ?
            ORDER BY pick_number ASC;
            """,
            (normalize_game_id(game_id),),
        ).fetchall()
        return [dict(r) for r in rows]

    def list_restricted_player_ids(self, parent_id: str) -> set[str]:
        rows = self._conn.execute(
            "SELECT player_id FROM parent_player_restrictions WHERE parent_id=?;",
            (normalize_profile_id(parent_id),),
        ).fetchall()
        return {str(r["player_id"]) for r in rows}

    def is_restricted(self, parent_id: str, player_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM parent_player_restrictions WHERE parent_id=? AND player_id=?;",
            (normalize_profile_id(parent_id), normalize_player_id(player_id)),
        ).fetchone()
        return row is not None

    def list_completed_game_log_points(self) -> List[Dict[str, Any]]:
        """(player_id, points) per log entry of games whose status is 'completed'.

        A log whose scoring rule is missing counts as 0 points.
        """
        rows = self._conn.execute(
            """
            SELECT l.player_id AS player_id, COALESCE(r.points, 0) AS points
            FROM game_logs l
            JOIN games g ON g.game_id = l.game_id
            LEFT JOIN scoring_rules r ON r.rule_id = l.rule_id
            WHERE g.status = 'completed'
            ORDER BY l.log_id ASC;
            """
        ).fetchall()
        return [dict(r) for r in rows]

    # ------------------------
    # Draft pick log (append-only)
    # ------------------------

    def insert_draft_pick(
        self,
        *,
        game_id: str,
        picked_by_profile_id: str,
        player_id: str,
        round_number: int,
        pick_number: int,
        source: str = PICK_SOURCE_USER,
        entered_by_profile_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Append one row to draft_picks and return the committed row.

        Raises StoreConflictError when (game_id, player_id) or (game_id, pick_number)
        already exists. The insert notification is published after the outermost commit.
        """
        gid = normalize_game_id(game_id)
        src = str(source or PICK_SOURCE_USER)
        if src not in PICK_SOURCES:
            raise ValueError(f"invalid pick source: {source!r}")
        if int(round_number) < 1 or int(pick_number) < 1:
            raise ValueError(f"round_number/pick_number must be >= 1 (got {round_number}/{pick_number})")

        created_at = _utc_now_iso()
        with self.transaction() as cur:
            try:
                cur.execute(
                    """
                    INSERT INTO draft_picks(
                        game_id, picked_by_profile_id, player_id, round_number, pick_number,
                        source, entered_by_profile_id, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        gid,
                        normalize_profile_id(picked_by_profile_id),
                        normalize_player_id(player_id),
                        int(round_number),
                        int(pick_number),
                        src,
                        normalize_profile_id(entered_by_profile_id) if entered_by_profile_id else None,
                        created_at,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                constraint = _classify_integrity_error(exc)
                if constraint is None:
                    raise
                raise StoreConflictError(constraint, f"draft pick rejected by {constraint}: {exc}") from exc
            row_id = int(cur.lastrowid)
            row = cur.execute(
                """
                SELECT pick_id, game_id, picked_by_profile_id, player_id, round_number, pick_number,
                       source, entered_by_profile_id, created_at
                FROM draft_picks WHERE pick_id=?;
                """,
                (row_id,),
            ).fetchone()
            self._queue_insert_event("draft_picks", gid, row_id)
        return dict(row)

    # ------------------------
    # Integrity
    # ------------------------

    def validate_integrity(self) -> List[str]:
        """
        Fail fast on a broken pick log / draft order; return soft warnings.

        Hard errors (ValueError):
          - schema version mismatch
          - pick_number per game not contiguous from 1
          - draft order pick_order per game not dense from 1
        Warnings (logged + returned):
          - picks in a game with no draft order
          - picks attributed to a parent outside the game's draft order (orphaned)
        """
        row = self._conn.execute("SELECT value FROM meta WHERE key='schema_version';").fetchone()
        if not row:
            raise ValueError("DB meta.schema_version missing (run init_db)")
        if row["value"] != SCHEMA_VERSION:
            raise ValueError(f"DB schema_version {row['value']} != expected {SCHEMA_VERSION}")

        warnings: List[str] = []

        order_by_game: Dict[str, List[Dict[str, Any]]] = {}
        for r in self._conn.execute(
            "SELECT game_id, profile_id, pick_order FROM game_draft_order ORDER BY game_id, pick_order;"
        ).fetchall():
            order_by_game.setdefault(str(r["game_id"]), []).append(dict(r))
        for gid, rows in order_by_game.items():
            slots = [int(r["pick_order"]) for r in rows]
            if slots != list(range(1, len(slots) + 1)):
                raise ValueError(f"game_draft_order not dense from 1 (game_id={gid}): {slots}")

        picks_by_game: Dict[str, List[Dict[str, Any]]] = {}
        for r in self._conn.execute(
            "SELECT game_id, picked_by_profile_id, pick_number FROM draft_picks ORDER BY game_id, pick_number;"
        ).fetchall():
            picks_by_game.setdefault(str(r["game_id"]), []).append(dict(r))
        for gid, rows in picks_by_game.items():
            numbers = [int(r["pick_number"]) for r in rows]
            if numbers != list(range(1, len(numbers) + 1)):
                raise ValueError(f"draft_picks.pick_number not contiguous from 1 (game_id={gid}): {numbers}")
            order_ids = {str(o["profile_id"]) for o in order_by_game.get(gid, [])}
            if not order_ids:
                warnings.append(f"DRAFT_PICKS_WITHOUT_ORDER game_id={gid} picks={len(rows)}")
                continue
            orphaned = sorted({str(r["picked_by_profile_id"]) for r in rows} - order_ids)
            if orphaned:
                warnings.append(f"DRAFT_PICKS_ORPHANED game_id={gid} profile_ids={orphaned}")

        for w in warnings:
            code, _, msg = w.partition(" ")
            _warn_limited(code, msg)
        return warnings

    # ------------------------
    # Import
    # ------------------------

    def import_players_file(self, path: str | Path, *, sheet_name: Optional[str] = None) -> int:
        """
        Upsert players from a CSV or Excel roster file.

        Required columns: player_id, name. Optional: type (kid|coach, default kid), is_active.
        Returns the number of rows imported.
        """
        import pandas as pd  # local import so repo can be used without pandas in non-import contexts

        path = Path(path)
        if path.suffix.lower() in {".xlsx", ".xls"}:
            df = pd.read_excel(path, sheet_name=(sheet_name if sheet_name is not None else 0))
        else:
            df = pd.read_csv(path)
        df.columns = [str(c).strip().lower() for c in df.columns]
        _require_columns(list(df.columns), ["player_id", "name"])

        df["player_id"] = df["player_id"].astype(str).str.strip()
        df["name"] = df["name"].astype(str).str.strip()
        assert_unique_ids(df["player_id"].tolist(), what="player_id (in file)")
        if "type" not in df.columns:
            df["type"] = "kid"
        if "is_active" not in df.columns:
            df["is_active"] = True

        now = _utc_now_iso()
        rows = []
        for rec in df.to_dict(orient="records"):
            rows.append((
                normalize_player_id(rec["player_id"]),
                rec["name"],
                normalize_player_type(rec.get("type") or "kid"),
                1 if _to_bool(rec.get("is_active")) else 0,
                now,
                now,
            ))

        with self.transaction() as cur:
            cur.executemany(
                """
                INSERT INTO players(player_id, name, type, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                    name=excluded.name,
                    type=excluded.type,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at;
                """,
                rows,
            )
        return len(rows)

    # ------------------------
    # Convenience
    # ------------------------

    def __enter__(self) -> "LeagueRepo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------
# CLI
# ----------------------------

def _cmd_init(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
    print(f"OK: initialized {args.db}")

def _cmd_import_players(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
        n = repo.import_players_file(args.file, sheet_name=args.sheet)
    print(f"OK: imported {n} players from {args.file} into {args.db}")

def _cmd_validate(args) -> None:
    with LeagueRepo(args.db) as repo:
        warnings = repo.validate_integrity()
    for w in warnings:
        print(f"WARN: {w}")
    print(f"OK: validation passed for {args.db}")

def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="LeagueRepo (SQLite single source of truth)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="initialize DB schema")
    p_init.add_argument("--db", required=True, help="path to sqlite db file")
    p_init.set_defaults(func=_cmd_init)

    p_imp = sub.add_parser("import_players", help="import players from a CSV/Excel roster file")
    p_imp.add_argument("--db", required=True, help="path to sqlite db file")
    p_imp.add_argument("--file", required=True, help="path to roster .csv/.xlsx file")
    p_imp.add_argument("--sheet", default=None, help="sheet name (optional, Excel only)")
    p_imp.set_defaults(func=_cmd_import_players)

    p_val = sub.add_parser("validate", help="validate DB integrity")
    p_val.add_argument("--db", required=True, help="path to sqlite db file")
    p_val.set_defaults(func=_cmd_validate)

    args = p.parse_args(argv)
    args.func(args)

if __name__ == "__main__":
    main()
