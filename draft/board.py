from __future__ import annotations

"""Draft board: the single view a client renders.

load_draft_board() reads pool sources + draft order + pick log in one snapshot,
then runs the pure pool builder and snake projector over them. A board is a
throwaway value: it is rebuilt from the store on every refresh.
"""

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from league_repo import LeagueRepo

from .errors import DraftUnavailableError, STORE_UNAVAILABLE
from .order import project_draft_state, sort_draft_order
from .pool import DraftPool, pool_from_sources, read_pool_sources
from .types import DraftOrderEntry, DraftPickRecord, DraftState, norm_id


@dataclass(frozen=True, slots=True)
class DraftBoard:
    game_id: str
    game_status: str
    viewer_id: Optional[str]
    state: DraftState
    pool: DraftPool
    order: Tuple[DraftOrderEntry, ...]
    picks: Tuple[DraftPickRecord, ...]
    usernames: Dict[str, str] = field(default_factory=dict)

    @property
    def is_my_turn(self) -> bool:
        return self.viewer_id is not None and self.state.current_picker_id == self.viewer_id

    @property
    def current_picker_name(self) -> Optional[str]:
        if self.state.current_picker_id is None:
            return None
        return self.usernames.get(self.state.current_picker_id)

    def picks_by_parent(self) -> List[Dict[str, Any]]:
        """Draft results grouped per parent, in draft-order sequence."""
        names = {e.player_id: e.name for e in self.pool.entries}
        out = []
        for o in self.order:
            mine = [p for p in self.picks if p.picked_by_profile_id == o.profile_id]
            out.append({
                "profile_id": o.profile_id,
                "pick_order": int(o.pick_order),
                "username": self.usernames.get(o.profile_id),
                "picks": [
                    {**p.to_dict(), "player_name": names.get(p.player_id, "Unknown")}
                    for p in mine
                ],
            })
        return out

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "game_status": self.game_status,
            "viewer_id": self.viewer_id,
            "is_my_turn": bool(self.is_my_turn),
            "current_picker_name": self.current_picker_name,
            "state": self.state.to_dict(),
            "pool": self.pool.to_public_dict(),
            "order": [o.to_dict() for o in self.order],
            "picks": [p.to_dict() for p in self.picks],
            "results": self.picks_by_parent(),
        }


def load_draft_board(repo, game_id: str, viewer_id: Optional[str]) -> DraftBoard:
    gid = norm_id(game_id)
    vid = norm_id(viewer_id) or None
    sources = read_pool_sources(repo, gid, vid)

    order = tuple(sort_draft_order(sources.order))
    picks = tuple(DraftPickRecord.from_row(r) for r in sources.picks)
    state = project_draft_state(order, picks)
    pool = pool_from_sources(sources, game_id=gid, parent_id=vid)
    try:
        usernames = repo.get_usernames([o.profile_id for o in order] + [p.picked_by_profile_id for p in picks])
    except sqlite3.Error as exc:
        raise DraftUnavailableError(STORE_UNAVAILABLE, "cannot read draft data, retry", {"game_id": gid}) from exc

    return DraftBoard(
        game_id=gid,
        game_status=str(sources.game.get("status") or ""),
        viewer_id=vid,
        state=state,
        pool=pool,
        order=order,
        picks=picks,
        usernames=usernames,
    )


def board_loader(db_path: str, game_id: str, viewer_id: Optional[str]) -> Callable[[], DraftBoard]:
    """Factory for a zero-arg loader that opens its own connection per call (thread-safe).

    Connection failures surface as DraftUnavailableError like any other failed read.
    """

    def _load() -> DraftBoard:
        try:
            repo = LeagueRepo(db_path)
        except sqlite3.Error as exc:
            raise DraftUnavailableError(
                STORE_UNAVAILABLE, "cannot open draft store, retry", {"game_id": game_id, "error": str(exc)}
            ) from exc
        with repo:
            return load_draft_board(repo, game_id, viewer_id)

    return _load
