from __future__ import annotations

from typing import Iterable, Optional, Sequence

import pytest

from league_repo import LeagueRepo
from draft.types import Principal


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "draft.db"
    with LeagueRepo(path) as repo:
        repo.init_db()
    return str(path)


@pytest.fixture
def repo(db_path):
    r = LeagueRepo(db_path)
    yield r
    r.close()


@pytest.fixture
def make_game(repo):
    """Seed one game: profiles, players (name == id), attendance, draft order, restrictions.

    A commissioner profile "C" always exists and is never in the draft order.
    """

    def _make(
        *,
        game_id: str = "G",
        parents: Sequence[str] = ("X", "Y", "Z"),
        players: Sequence[str] = ("P1", "P2", "P3"),
        order: Optional[Sequence[str]] = None,
        restrictions: Iterable[tuple] = (),
        status: str = "drafting",
    ) -> str:
        repo.upsert_profile("C", "Commish", is_commissioner=True)
        for p in parents:
            repo.upsert_profile(p, f"parent-{p}")
        for pl in players:
            repo.upsert_player(pl, pl, type="kid")
        repo.upsert_game(game_id, opponent_name="Tigers", game_date="2026-10-18", status=status)
        repo.set_game_attendance(game_id, players)
        repo.set_draft_order(game_id, list(parents if order is None else order))
        for parent_id, player_id in restrictions:
            repo.add_restriction(parent_id, player_id)
        return game_id

    return _make


@pytest.fixture
def parent():
    return lambda pid: Principal(profile_id=pid)


@pytest.fixture
def commissioner():
    return Principal(profile_id="C", is_commissioner=True)
