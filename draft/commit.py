from __future__ import annotations

"""Pick commit protocol.

commit_pick() validates and appends exactly one draft_picks row. Checks run in a
fixed order and the first failing one wins:

  1) authorization : caller is on the clock, or a commissioner naming an override target
  2) eligibility   : player attends the game and is not restricted for the attributed parent
                     (commissioner overrides skip restrictions unless
                     config.OVERRIDE_ENFORCES_RESTRICTIONS is on)
  3) eligibility   : player has no pick in this game yet (real pick log, not the pool view)

Concurrency:
  The whole read-check-insert runs in one BEGIN IMMEDIATE transaction, and
  draft_picks carries UNIQUE(game_id, player_id) / UNIQUE(game_id, pick_number).
  A losing concurrent insert surfaces as DraftConflictError. Nothing is retried.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional, Tuple

import config
from league_repo import StoreConflictError
from schema import PICK_SOURCE_OVERRIDE, PICK_SOURCE_USER

from .errors import (
    DraftAuthorizationError,
    DraftConflictError,
    DraftEligibilityError,
    DraftError,
    DraftNotFoundError,
    DraftUnavailableError,
    GAME_NOT_FOUND,
    NO_ACTIVE_PICKER,
    NOT_YOUR_TURN,
    OVERRIDE_NOT_ALLOWED,
    OVERRIDE_TARGET_NOT_IN_ORDER,
    PICK_CONFLICT,
    PLAYER_ALREADY_DRAFTED,
    PLAYER_NOT_IN_POOL,
    PLAYER_RESTRICTED,
    STORE_UNAVAILABLE,
)
from .order import project_draft_state, sort_draft_order
from .types import DraftOrderEntry, DraftPickRecord, DraftState, Principal, norm_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommitOutcome:
    """Value-style result of try_commit_pick(): success, or rejected(reason)."""

    ok: bool
    pick: Optional[DraftPickRecord] = None
    error: Optional[DraftError] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.code if self.error is not None else None


def authorize_pick(
    state: DraftState,
    order: Tuple[DraftOrderEntry, ...],
    actor: Principal,
    forced_parent_id: Optional[str] = None,
) -> Tuple[str, bool]:
    """Return (attributed parent_id, is_override) or raise DraftAuthorizationError."""
    if forced_parent_id is not None and norm_id(forced_parent_id):
        target = norm_id(forced_parent_id)
        if not actor.is_commissioner:
            raise DraftAuthorizationError(
                OVERRIDE_NOT_ALLOWED,
                "only a commissioner may pick on behalf of another parent",
                {"actor_id": actor.profile_id, "forced_parent_id": target},
            )
        if order and target not in {e.profile_id for e in order}:
            raise DraftAuthorizationError(
                OVERRIDE_TARGET_NOT_IN_ORDER,
                "override target is not in this game's draft order",
                {"forced_parent_id": target},
            )
        return target, True

    if state.current_picker_id is None:
        raise DraftAuthorizationError(
            NO_ACTIVE_PICKER,
            "no draft order is configured; only a commissioner override may pick",
            {"actor_id": actor.profile_id},
        )
    if actor.profile_id != state.current_picker_id:
        raise DraftAuthorizationError(
            NOT_YOUR_TURN,
            "not your turn",
            {"actor_id": actor.profile_id, "current_picker_id": state.current_picker_id},
        )
    return actor.profile_id, False


def commit_pick(
    repo,
    *,
    game_id: str,
    player_id: str,
    actor: Principal,
    forced_parent_id: Optional[str] = None,
    source: str = PICK_SOURCE_USER,
    override_enforces_restrictions: Optional[bool] = None,
) -> DraftPickRecord:
    """Validate and append one pick. Raises a DraftError subclass on rejection."""
    gid = norm_id(game_id)
    pid = norm_id(player_id)
    enforce_on_override = (
        config.OVERRIDE_ENFORCES_RESTRICTIONS
        if override_enforces_restrictions is None
        else bool(override_enforces_restrictions)
    )

    try:
        with repo.transaction(immediate=True):
            if repo.get_game(gid) is None:
                raise DraftNotFoundError(GAME_NOT_FOUND, f"game not found: {gid}", {"game_id": gid})

            order = tuple(sort_draft_order(repo.list_draft_order(gid)))
            picks = [DraftPickRecord.from_row(r) for r in repo.list_draft_picks(gid)]
            state = project_draft_state(order, picks)

            parent_id, is_override = authorize_pick(state, order, actor, forced_parent_id)

            if not pid or not repo.is_player_attending(gid, pid):
                raise DraftEligibilityError(
                    PLAYER_NOT_IN_POOL,
                    "player is not in this game's pool",
                    {"player_id": pid},
                )
            if (not is_override or enforce_on_override) and repo.is_restricted(parent_id, pid):
                raise DraftEligibilityError(
                    PLAYER_RESTRICTED,
                    "player is restricted for this parent",
                    {"player_id": pid, "parent_id": parent_id},
                )
            if any(p.player_id == pid for p in picks):
                raise DraftEligibilityError(
                    PLAYER_ALREADY_DRAFTED,
                    "player has already been drafted in this game",
                    {"player_id": pid},
                )

            pick_number = max((int(p.pick_number) for p in picks), default=0) + 1
            row = repo.insert_draft_pick(
                game_id=gid,
                picked_by_profile_id=parent_id,
                player_id=pid,
                round_number=state.current_round,
                pick_number=pick_number,
                source=(PICK_SOURCE_OVERRIDE if is_override else source),
                entered_by_profile_id=actor.profile_id,
            )
    except StoreConflictError as exc:
        raise DraftConflictError(
            PICK_CONFLICT,
            "another pick was committed first; refresh the draft and try again",
            {"game_id": gid, "player_id": pid, "constraint": exc.constraint},
        ) from exc
    except sqlite3.Error as exc:
        raise DraftUnavailableError(
            STORE_UNAVAILABLE,
            "draft store unavailable, retry",
            {"game_id": gid, "error": str(exc)},
        ) from exc

    record = DraftPickRecord.from_row(row)
    if is_override:
        logger.info(
            "commissioner override pick: game_id=%s pick=%s player_id=%s for=%s by=%s",
            gid, record.pick_number, pid, parent_id, actor.profile_id,
        )
    else:
        logger.debug("pick committed: game_id=%s pick=%s player_id=%s by=%s", gid, record.pick_number, pid, parent_id)
    return record


def try_commit_pick(repo, **kwargs) -> CommitOutcome:
    """commit_pick() returning a CommitOutcome instead of raising on rejection."""
    try:
        return CommitOutcome(ok=True, pick=commit_pick(repo, **kwargs))
    except DraftError as exc:
        return CommitOutcome(ok=False, error=exc)
