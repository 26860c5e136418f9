from __future__ import annotations

"""Draft AI interfaces + the auto-pick fallback policy.

BestAveragePolicy picks the legal player (unrestricted, and absent from the real pick
log even after a pool reset) with the highest historical average. Ties keep pool
order (by name). With no legal candidate the policy returns None and no pick is generated.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from .pool import DraftPool
from .types import DraftState, PoolEntry, norm_id


@dataclass(frozen=True, slots=True)
class DraftAIContext:
    game_id: str
    parent_id: str
    state: DraftState
    meta: Dict[str, Any] = field(default_factory=dict)  # optional misc knobs

    def __post_init__(self) -> None:
        object.__setattr__(self, "game_id", norm_id(self.game_id))
        object.__setattr__(self, "parent_id", norm_id(self.parent_id))


@dataclass(frozen=True, slots=True)
class DraftAISelection:
    player_id: str
    meta: Dict[str, Any] = field(default_factory=dict)


class DraftAIPolicy(Protocol):
    def choose(self, pool: DraftPool, ctx: DraftAIContext) -> Optional[DraftAISelection]:
        ...


def auto_pick(pool: DraftPool) -> Optional[PoolEntry]:
    """Highest average_points among legal entries; first in pool order on ties.

    Players already in the pick log are skipped even when a pool reset reports them
    available: the commit would reject them.
    """
    best: Optional[PoolEntry] = None
    for e in pool.list_legal():
        if e.player_id in pool.drafted_player_ids:
            continue
        if best is None or float(e.average_points) > float(best.average_points):
            best = e
    return best


class BestAveragePolicy:
    key = "best_average_v1"

    def choose(self, pool: DraftPool, ctx: DraftAIContext) -> Optional[DraftAISelection]:
        entry = auto_pick(pool)
        if entry is None:
            return None
        return DraftAISelection(
            player_id=entry.player_id,
            meta={
                "policy": self.key,
                "average_points": float(entry.average_points),
                "round": int(ctx.state.current_round),
            },
        )
