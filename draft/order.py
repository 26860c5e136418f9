from __future__ import annotations

"""Snake draft projection (pure).

Responsibilities:
  - From the configured draft order (game_draft_order) and the committed pick log
    (draft_picks ordered by pick_number) -> who is on the clock, current round,
    position within the round.
  - Odd rounds walk the order forward, even rounds walk it backward:
        1,2,3 | 3,2,1 | 1,2,3 ...

Note:
  Nothing here reads the DB or keeps state. Callers re-project from the full pick
  log on every refresh; the projection is never applied incrementally.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .types import DraftOrderEntry, DraftPickRecord, DraftState

logger = logging.getLogger(__name__)


def snake_order_index(pick_index: int, parent_count: int) -> int:
    """0-based index into the draft order for the pick at 0-based overall pick_index."""
    p = int(parent_count)
    n = int(pick_index)
    if p <= 0:
        raise ValueError("parent_count must be >= 1")
    if n < 0:
        raise ValueError(f"pick_index must be >= 0, got {n}")
    round_no = n // p + 1
    pos = n % p
    return (p - 1 - pos) if round_no % 2 == 0 else pos


def round_for_pick_number(pick_number: int, parent_count: int) -> int:
    """1-based round of the 1-based overall pick_number."""
    if int(parent_count) <= 0:
        return 1
    return (int(pick_number) - 1) // int(parent_count) + 1


def picker_for_pick_number(order: Sequence[DraftOrderEntry], pick_number: int) -> str:
    """profile_id on the clock for the 1-based overall pick_number."""
    entries = sort_draft_order(order)
    if not entries:
        raise ValueError("draft order is empty")
    return entries[snake_order_index(int(pick_number) - 1, len(entries))].profile_id


def sort_draft_order(order: Iterable[Any]) -> List[DraftOrderEntry]:
    entries = [o if isinstance(o, DraftOrderEntry) else DraftOrderEntry.from_row(o) for o in order]
    entries.sort(key=lambda e: (int(e.pick_order), e.profile_id))
    return entries


def _order_warnings(entries: Sequence[DraftOrderEntry]) -> List[str]:
    out: List[str] = []
    slots = [int(e.pick_order) for e in entries]
    if slots != list(range(1, len(slots) + 1)):
        out.append(f"DRAFT_ORDER_NOT_DENSE pick_orders={slots}")
    return out


def project_draft_state(
    order: Iterable[Any],
    picks: Iterable[Any],
) -> DraftState:
    """Project (draft order, committed picks) -> DraftState.

    Total function: malformed input (empty order with picks, picks by parents outside
    the order, non-dense pick_order) degrades to warnings, never raises.
    """
    entries = sort_draft_order(order)
    pick_list = [p if isinstance(p, DraftPickRecord) else DraftPickRecord.from_row(p) for p in picks]

    p = len(entries)
    n = len(pick_list)
    warnings: List[str] = _order_warnings(entries)

    if p == 0:
        if n > 0:
            warnings.append(f"DRAFT_PICKS_WITHOUT_ORDER picks={n}")
        state = DraftState(
            parent_count=0,
            pick_count=n,
            current_round=1,
            position_in_round=0,
            current_picker_id=None,
            warnings=tuple(warnings),
        )
        _log_warnings(state)
        return state

    order_ids = {e.profile_id for e in entries}
    orphaned = sorted({pk.picked_by_profile_id for pk in pick_list} - order_ids)
    if orphaned:
        warnings.append(f"DRAFT_PICKS_ORPHANED profile_ids={orphaned}")

    numbers = [int(pk.pick_number) for pk in pick_list]
    if numbers != list(range(1, n + 1)):
        warnings.append(f"DRAFT_PICK_NUMBERS_NOT_CONTIGUOUS pick_numbers={numbers}")

    current_round = n // p + 1
    position = n % p
    picker = entries[snake_order_index(n, p)].profile_id

    state = DraftState(
        parent_count=p,
        pick_count=n,
        current_round=current_round,
        position_in_round=position,
        current_picker_id=picker,
        warnings=tuple(warnings),
    )
    _log_warnings(state)
    return state


def _log_warnings(state: DraftState) -> None:
    for w in state.warnings:
        logger.warning("draft projection data-integrity warning: %s", w)


def expected_picker_sequence(order: Sequence[Any], pick_count: int) -> Tuple[Optional[str], ...]:
    """profile_ids on the clock for picks 1..pick_count (None when no order)."""
    entries = sort_draft_order(order)
    if not entries:
        return tuple(None for _ in range(int(pick_count)))
    return tuple(entries[snake_order_index(i, len(entries))].profile_id for i in range(int(pick_count)))
