from __future__ import annotations

"""Draft domain types.

This module is deliberately dependency-light so it can be imported by:
- draft.order   (pure snake-draft projection)
- draft.pool    (pool resolution)
- draft.commit  (pick commit protocol)
- the API layer (public dict shapes)

Conventions aligned with this codebase:
- profile_id / player_id / game_id are opaque strings (see schema.py)
- pick_number is the global 1-based sequence within a game
- round_number is derived from pick_number and the draft order size, never authoritative
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

ProfileId = str
PlayerId = str
GameId = str


def norm_id(v: Any) -> str:
    """Normalize an id into the canonical form used across the project."""
    return str(v or "").strip()


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller as seen by the draft engine."""

    profile_id: ProfileId
    is_commissioner: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "profile_id", norm_id(self.profile_id))
        object.__setattr__(self, "is_commissioner", bool(self.is_commissioner))


@dataclass(frozen=True, slots=True)
class DraftOrderEntry:
    profile_id: ProfileId
    pick_order: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DraftOrderEntry":
        return cls(profile_id=norm_id(row.get("profile_id")), pick_order=int(row.get("pick_order") or 0))

    def to_dict(self) -> Dict[str, Any]:
        return {"profile_id": self.profile_id, "pick_order": int(self.pick_order)}


@dataclass(frozen=True, slots=True)
class DraftPickRecord:
    """One committed row of the append-only pick log."""

    game_id: GameId
    picked_by_profile_id: ProfileId
    player_id: PlayerId
    round_number: int
    pick_number: int
    pick_id: Optional[int] = None
    source: str = "draft_user"
    entered_by_profile_id: Optional[ProfileId] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DraftPickRecord":
        return cls(
            game_id=norm_id(row.get("game_id")),
            picked_by_profile_id=norm_id(row.get("picked_by_profile_id")),
            player_id=norm_id(row.get("player_id")),
            round_number=int(row.get("round_number") or 0),
            pick_number=int(row.get("pick_number") or 0),
            pick_id=(int(row["pick_id"]) if row.get("pick_id") is not None else None),
            source=str(row.get("source") or "draft_user"),
            entered_by_profile_id=(norm_id(row["entered_by_profile_id"]) if row.get("entered_by_profile_id") else None),
            created_at=(str(row["created_at"]) if row.get("created_at") else None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pick_id": self.pick_id,
            "game_id": self.game_id,
            "picked_by_profile_id": self.picked_by_profile_id,
            "player_id": self.player_id,
            "round_number": int(self.round_number),
            "pick_number": int(self.pick_number),
            "source": self.source,
            "entered_by_profile_id": self.entered_by_profile_id,
            "created_at": self.created_at,
        }


@dataclass(frozen=True, slots=True)
class DraftState:
    """Projection of the pick log onto the snake order (who is on the clock).

    current_picker_id is None when no draft order is configured ("no active picker").
    position_in_round is 0-based; pick_in_round is the 1-based display value.
    """

    parent_count: int
    pick_count: int
    current_round: int
    position_in_round: int
    current_picker_id: Optional[ProfileId]
    warnings: Tuple[str, ...] = ()

    @property
    def has_active_picker(self) -> bool:
        return self.current_picker_id is not None

    @property
    def pick_in_round(self) -> int:
        return int(self.position_in_round) + 1

    @property
    def next_pick_number(self) -> int:
        return int(self.pick_count) + 1

    @property
    def is_reversed_round(self) -> bool:
        return int(self.current_round) % 2 == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent_count": int(self.parent_count),
            "pick_count": int(self.pick_count),
            "current_round": int(self.current_round),
            "position_in_round": int(self.position_in_round),
            "pick_in_round": int(self.pick_in_round),
            "next_pick_number": int(self.next_pick_number),
            "current_picker_id": self.current_picker_id,
            "is_reversed_round": bool(self.is_reversed_round),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True, slots=True)
class PoolEntry:
    """A draftable player annotated for one viewing parent."""

    player_id: PlayerId
    name: str
    type: str = "kid"
    is_active: bool = True
    is_restricted: bool = False
    is_drafted: bool = False
    average_points: float = 0.0

    @property
    def is_legal(self) -> bool:
        return not self.is_restricted and not self.is_drafted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "type": self.type,
            "is_active": bool(self.is_active),
            "is_restricted": bool(self.is_restricted),
            "is_drafted": bool(self.is_drafted),
            "average_points": round(float(self.average_points), 4),
        }
