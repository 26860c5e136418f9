from __future__ import annotations

"""Draft player pool (DB-backed, re-resolved on every view).

Source of truth:
  - game_attendance            (who may be drafted in this game)
  - draft_picks                (who is already taken)
  - game_draft_order           (how many parents are drafting)
  - parent_player_restrictions (who the viewing parent may never draft)
  - game_logs x games x scoring_rules (historical average, completed games only)

Pool-exhaustion reset:
  When fewer undrafted players remain than there are parents, every player is
  reported as available again so the board never runs dry. This is a read-time
  view only: draft_picks is never touched and the commit path keeps checking the
  real pick log (`drafted_player_ids`).
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .errors import DraftNotFoundError, DraftUnavailableError, GAME_NOT_FOUND, STORE_UNAVAILABLE
from .types import PoolEntry, norm_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DraftPool:
    """Ordered-by-name pool for one game as seen by one parent."""

    game_id: str
    viewer_id: Optional[str]
    entries: tuple
    drafted_player_ids: frozenset = field(default_factory=frozenset)
    was_reset: bool = False

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, player_id: str) -> PoolEntry:
        pid = norm_id(player_id)
        for e in self.entries:
            if e.player_id == pid:
                return e
        raise KeyError(f"player not in pool: player_id={player_id}")

    def contains(self, player_id: str) -> bool:
        pid = norm_id(player_id)
        return any(e.player_id == pid for e in self.entries)

    def list_legal(self) -> List[PoolEntry]:
        """Entries the viewer may pick as reported by this pool (unrestricted, undrafted)."""
        return [e for e in self.entries if e.is_legal]

    def undrafted_count(self) -> int:
        return sum(1 for e in self.entries if e.player_id not in self.drafted_player_ids)

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "viewer_id": self.viewer_id,
            "was_reset": bool(self.was_reset),
            "players": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True, slots=True)
class PoolSources:
    """Raw reads feeding the pool (and, for the board, the projector)."""

    game: Dict[str, Any]
    attendance: List[Dict[str, Any]]
    picks: List[Dict[str, Any]]
    order: List[Dict[str, Any]]
    restricted_player_ids: Set[str]
    history: List[Dict[str, Any]]


def compute_average_points(log_rows: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """Mean points per scoring log entry, per player."""
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for r in log_rows:
        pid = norm_id(r.get("player_id"))
        if not pid:
            continue
        pts = r.get("points")
        totals[pid] = totals.get(pid, 0.0) + float(pts or 0.0)
        counts[pid] = counts.get(pid, 0) + 1
    return {pid: totals[pid] / counts[pid] for pid in totals}


def should_reset_pool(*, undrafted_count: int, parent_count: int) -> bool:
    return int(parent_count) > 0 and int(undrafted_count) < int(parent_count)


def build_pool(
    *,
    game_id: str,
    viewer_id: Optional[str],
    attendance: Iterable[Mapping[str, Any]],
    drafted_player_ids: Iterable[str],
    restricted_player_ids: Iterable[str],
    average_points_by_player: Mapping[str, float],
    parent_count: int,
) -> DraftPool:
    """Assemble the annotated pool (pure)."""
    drafted = frozenset(norm_id(p) for p in drafted_player_ids)
    restricted = {norm_id(p) for p in restricted_player_ids}

    rows = [dict(r) for r in attendance]
    rows.sort(key=lambda r: (str(r.get("name") or "").lower(), norm_id(r.get("player_id"))))

    undrafted = sum(1 for r in rows if norm_id(r.get("player_id")) not in drafted)
    reset = should_reset_pool(undrafted_count=undrafted, parent_count=parent_count)
    if reset:
        logger.info(
            "pool exhausted, reporting all players available (game_id=%s undrafted=%s parents=%s)",
            game_id, undrafted, parent_count,
        )

    entries = []
    for r in rows:
        pid = norm_id(r.get("player_id"))
        entries.append(PoolEntry(
            player_id=pid,
            name=str(r.get("name") or ""),
            type=str(r.get("type") or "kid"),
            is_active=bool(r.get("is_active", True)),
            is_restricted=pid in restricted,
            is_drafted=(False if reset else pid in drafted),
            average_points=float(average_points_by_player.get(pid, 0.0)),
        ))

    return DraftPool(
        game_id=norm_id(game_id),
        viewer_id=(norm_id(viewer_id) if viewer_id else None),
        entries=tuple(entries),
        drafted_player_ids=drafted,
        was_reset=reset,
    )


def read_pool_sources(repo, game_id: str, parent_id: Optional[str]) -> PoolSources:
    """Read every source of the pool in one snapshot.

    Any failing read raises DraftUnavailableError: a partial read must never be rendered.
    """
    try:
        with repo.transaction():
            game = repo.get_game(game_id)
            if game is None:
                raise DraftNotFoundError(GAME_NOT_FOUND, f"game not found: {game_id}", {"game_id": game_id})
            return PoolSources(
                game=game,
                attendance=repo.list_game_attendance(game_id),
                picks=repo.list_draft_picks(game_id),
                order=repo.list_draft_order(game_id),
                restricted_player_ids=(repo.list_restricted_player_ids(parent_id) if parent_id else set()),
                history=repo.list_completed_game_log_points(),
            )
    except sqlite3.Error as exc:
        raise DraftUnavailableError(
            STORE_UNAVAILABLE,
            "cannot read draft data, retry",
            {"game_id": game_id, "error": str(exc)},
        ) from exc


def pool_from_sources(sources: PoolSources, *, game_id: str, parent_id: Optional[str]) -> DraftPool:
    return build_pool(
        game_id=game_id,
        viewer_id=parent_id,
        attendance=sources.attendance,
        drafted_player_ids=[r.get("player_id") for r in sources.picks],
        restricted_player_ids=sources.restricted_player_ids,
        average_points_by_player=compute_average_points(sources.history),
        parent_count=len(sources.order),
    )


def resolve_player_pool(repo, game_id: str, parent_id: Optional[str]) -> DraftPool:
    """Draftable players of a game annotated for `parent_id` (read-only)."""
    sources = read_pool_sources(repo, game_id, parent_id)
    return pool_from_sources(sources, game_id=game_id, parent_id=parent_id)
