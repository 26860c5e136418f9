from __future__ import annotations

"""Draft engine orchestration.

This module ties together:
  - board  : pool + projection for the current picker
  - ai     : auto-pick policy (BestAveragePolicy)
  - commit : pick commit protocol

Auto-pick never commits when the policy finds no legal candidate.
"""

import logging
from typing import Optional

from schema import PICK_SOURCE_AUTO

from .ai import BestAveragePolicy, DraftAIContext, DraftAIPolicy
from .board import load_draft_board
from .commit import commit_pick
from .errors import (
    DraftAuthorizationError,
    DraftEligibilityError,
    NO_ACTIVE_PICKER,
    NO_LEGAL_CANDIDATE,
    NOT_YOUR_TURN,
)
from .types import DraftPickRecord, Principal

logger = logging.getLogger(__name__)

DEFAULT_AI_POLICY = BestAveragePolicy()


def auto_pick_and_commit(
    repo,
    *,
    game_id: str,
    actor: Principal,
    policy: Optional[DraftAIPolicy] = None,
) -> DraftPickRecord:
    """Pick the best legal player for whoever is on the clock and commit it.

    The current picker auto-picks for themself; a commissioner may trigger it for the
    current picker (recorded as a commissioner override).
    """
    policy = policy or DEFAULT_AI_POLICY
    # Probe the turn with the caller's identity first so non-pickers learn nothing else.
    board = load_draft_board(repo, game_id, actor.profile_id)
    picker = board.state.current_picker_id
    if picker is None:
        raise DraftAuthorizationError(NO_ACTIVE_PICKER, "no active picker", {"game_id": game_id})
    if actor.profile_id != picker and not actor.is_commissioner:
        raise DraftAuthorizationError(
            NOT_YOUR_TURN,
            "not your turn",
            {"actor_id": actor.profile_id, "current_picker_id": picker},
        )
    if actor.profile_id != picker:
        board = load_draft_board(repo, game_id, picker)

    ctx = DraftAIContext(game_id=game_id, parent_id=picker, state=board.state)
    selection = policy.choose(board.pool, ctx)
    if selection is None:
        raise DraftEligibilityError(
            NO_LEGAL_CANDIDATE,
            "no legal candidate to auto-pick",
            {"game_id": game_id, "parent_id": picker},
        )

    logger.info("auto-pick game_id=%s parent=%s player_id=%s meta=%s", game_id, picker, selection.player_id, selection.meta)
    return commit_pick(
        repo,
        game_id=game_id,
        player_id=selection.player_id,
        actor=actor,
        forced_parent_id=(picker if actor.profile_id != picker else None),
        source=PICK_SOURCE_AUTO,
    )
