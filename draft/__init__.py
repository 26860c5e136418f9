"""Snake draft turn engine.

Modules:
  - types   : core domain dataclasses (Principal, DraftOrderEntry, DraftPickRecord, DraftState, PoolEntry)
  - errors  : structured draft errors with stable codes
  - order   : snake projection of the pick log onto the draft order (pure)
  - pool    : player pool resolution incl. pool-exhaustion reset (DB-backed, read-only)
  - commit  : pick commit protocol (turn/eligibility checks + constraint-backed insert)
  - ai      : auto-pick policy (best historical average)
  - board   : pool + projection combined into the rendered view
  - live    : change feed for draft_picks inserts (pub/sub)
  - sync    : observer that refetches the board on every change signal
  - engine  : orchestration helpers (auto-pick and commit)
"""

from __future__ import annotations

from .types import DraftOrderEntry, DraftPickRecord, DraftState, PoolEntry, Principal

__all__ = [
    "Principal",
    "DraftOrderEntry",
    "DraftPickRecord",
    "DraftState",
    "PoolEntry",
]
