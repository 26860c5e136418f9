import threading

import pytest

import config
from draft.commit import commit_pick, try_commit_pick
from draft.errors import (
    DraftAuthorizationError,
    DraftConflictError,
    DraftEligibilityError,
    DraftNotFoundError,
)
from draft.order import project_draft_state, sort_draft_order
from draft.types import DraftPickRecord
from league_repo import LeagueRepo, StoreConflictError


def _state(repo, gid):
    order = sort_draft_order(repo.list_draft_order(gid))
    picks = [DraftPickRecord.from_row(r) for r in repo.list_draft_picks(gid)]
    return project_draft_state(order, picks)


def test_first_pick_is_recorded_and_turn_advances(repo, make_game, parent):
    gid = make_game()
    pick = commit_pick(repo, game_id=gid, player_id="P2", actor=parent("X"))

    assert pick.pick_number == 1
    assert pick.round_number == 1
    assert pick.picked_by_profile_id == "X"
    assert pick.source == "draft_user"
    assert pick.entered_by_profile_id == "X"
    assert pick.pick_id is not None

    state = _state(repo, gid)
    assert state.pick_count == 1
    assert state.current_picker_id == "Y"


def test_snake_turns_through_two_rounds(repo, make_game, parent):
    gid = make_game(parents=("X", "Y"), players=("P1", "P2", "P3", "P4", "P5"))
    for who, pid in [("X", "P1"), ("Y", "P2"), ("Y", "P3"), ("X", "P4")]:
        commit_pick(repo, game_id=gid, player_id=pid, actor=parent(who))

    rows = repo.list_draft_picks(gid)
    assert [r["round_number"] for r in rows] == [1, 1, 2, 2]
    assert [r["picked_by_profile_id"] for r in rows] == ["X", "Y", "Y", "X"]
    assert _state(repo, gid).current_picker_id == "X"


def test_turn_check_comes_before_player_checks(repo, make_game, parent):
    gid = make_game(restrictions=[("Y", "P1")])
    with pytest.raises(DraftAuthorizationError) as ei:
        commit_pick(repo, game_id=gid, player_id="NOBODY", actor=parent("Y"))
    assert ei.value.code == "NOT_YOUR_TURN"
    assert ei.value.details["current_picker_id"] == "X"
    assert repo.list_draft_picks(gid) == []


def test_restricted_player_is_rejected(repo, make_game, parent):
    gid = make_game(restrictions=[("X", "P1")])
    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"))
    assert not outcome.ok
    assert outcome.reason == "PLAYER_RESTRICTED"
    assert isinstance(outcome.error, DraftEligibilityError)
    assert repo.list_draft_picks(gid) == []


def test_player_outside_attendance_is_rejected(repo, make_game, parent):
    gid = make_game()
    repo.upsert_player("P9", "P9")
    outcome = try_commit_pick(repo, game_id=gid, player_id="P9", actor=parent("X"))
    assert outcome.reason == "PLAYER_NOT_IN_POOL"


def test_already_drafted_player_is_rejected(repo, make_game, parent):
    gid = make_game()
    commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"))
    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=parent("Y"))
    assert outcome.reason == "PLAYER_ALREADY_DRAFTED"
    assert len(repo.list_draft_picks(gid)) == 1


def test_unknown_game(repo, make_game, parent):
    make_game()
    with pytest.raises(DraftNotFoundError):
        commit_pick(repo, game_id="NOPE", player_id="P1", actor=parent("X"))


def test_commissioner_override_picks_out_of_turn(repo, make_game, commissioner):
    gid = make_game(restrictions=[("Z", "P3")])
    pick = commit_pick(repo, game_id=gid, player_id="P3", actor=commissioner, forced_parent_id="Z")

    assert pick.picked_by_profile_id == "Z"
    assert pick.entered_by_profile_id == "C"
    assert pick.source == "commissioner_override"
    assert pick.pick_number == 1
    # turn follows the pick count, not who was credited
    assert _state(repo, gid).current_picker_id == "Y"


def test_override_can_enforce_restrictions(repo, make_game, commissioner, monkeypatch):
    gid = make_game(restrictions=[("Z", "P3")])

    outcome = try_commit_pick(
        repo, game_id=gid, player_id="P3", actor=commissioner,
        forced_parent_id="Z", override_enforces_restrictions=True,
    )
    assert outcome.reason == "PLAYER_RESTRICTED"

    monkeypatch.setattr(config, "OVERRIDE_ENFORCES_RESTRICTIONS", True)
    outcome = try_commit_pick(repo, game_id=gid, player_id="P3", actor=commissioner, forced_parent_id="Z")
    assert outcome.reason == "PLAYER_RESTRICTED"


def test_override_still_rejects_drafted_player(repo, make_game, parent, commissioner):
    gid = make_game()
    commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"))
    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=commissioner, forced_parent_id="Z")
    assert outcome.reason == "PLAYER_ALREADY_DRAFTED"


def test_parent_cannot_override(repo, make_game, parent):
    gid = make_game()
    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"), forced_parent_id="Y")
    assert outcome.reason == "OVERRIDE_NOT_ALLOWED"


def test_override_target_must_be_in_order(repo, make_game, commissioner):
    gid = make_game()
    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=commissioner, forced_parent_id="C")
    assert outcome.reason == "OVERRIDE_TARGET_NOT_IN_ORDER"


def test_no_draft_order_only_allows_override(repo, make_game, parent, commissioner):
    gid = make_game(parents=())
    repo.upsert_profile("X", "parent-X")

    outcome = try_commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"))
    assert outcome.reason == "NO_ACTIVE_PICKER"

    pick = commit_pick(repo, game_id=gid, player_id="P1", actor=commissioner, forced_parent_id="X")
    assert pick.round_number == 1
    assert pick.pick_number == 1


def test_store_rejects_duplicate_player_and_pick_number(repo, make_game):
    gid = make_game()
    repo.insert_draft_pick(game_id=gid, picked_by_profile_id="X", player_id="P1", round_number=1, pick_number=1)

    with pytest.raises(StoreConflictError) as ei:
        repo.insert_draft_pick(game_id=gid, picked_by_profile_id="Y", player_id="P1", round_number=1, pick_number=2)
    assert ei.value.constraint == "draft_picks(game_id, player_id)"

    with pytest.raises(StoreConflictError) as ei:
        repo.insert_draft_pick(game_id=gid, picked_by_profile_id="Y", player_id="P2", round_number=1, pick_number=1)
    assert ei.value.constraint == "draft_picks(game_id, pick_number)"

    assert len(repo.list_draft_picks(gid)) == 1


def test_stale_pick_number_surfaces_as_conflict(repo, make_game, parent, monkeypatch):
    gid = make_game()
    commit_pick(repo, game_id=gid, player_id="P1", actor=parent("X"))

    # a reader that missed pick 1 computes pick_number 1 again
    monkeypatch.setattr(repo, "list_draft_picks", lambda game_id: [])
    with pytest.raises(DraftConflictError) as ei:
        commit_pick(repo, game_id=gid, player_id="P2", actor=parent("X"))
    assert ei.value.code == "PICK_CONFLICT"
    monkeypatch.undo()
    assert [r["player_id"] for r in repo.list_draft_picks(gid)] == ["P1"]


def test_concurrent_commits_record_exactly_one_pick(db_path, make_game):
    gid = make_game(players=("P1", "P2", "P3", "P4"))
    barrier = threading.Barrier(4)
    outcomes = []
    lock = threading.Lock()

    def _worker(player_id):
        from draft.types import Principal

        with LeagueRepo(db_path) as r:
            barrier.wait()
            out = try_commit_pick(r, game_id=gid, player_id=player_id, actor=Principal(profile_id="X"))
        with lock:
            outcomes.append(out)

    threads = [threading.Thread(target=_worker, args=(pid,)) for pid in ("P1", "P2", "P3", "P4")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(outcomes) == 4
    assert sum(1 for o in outcomes if o.ok) == 1
    assert {o.reason for o in outcomes if not o.ok} <= {"NOT_YOUR_TURN", "PICK_CONFLICT"}

    with LeagueRepo(db_path) as r:
        rows = r.list_draft_picks(gid)
    assert len(rows) == 1
    assert rows[0]["pick_number"] == 1


def test_concurrent_overrides_never_duplicate_a_player(db_path, make_game):
    gid = make_game()
    barrier = threading.Barrier(3)
    outcomes = []
    lock = threading.Lock()

    def _worker(target):
        from draft.types import Principal

        with LeagueRepo(db_path) as r:
            barrier.wait()
            out = try_commit_pick(
                r, game_id=gid, player_id="P1",
                actor=Principal(profile_id="C", is_commissioner=True), forced_parent_id=target,
            )
        with lock:
            outcomes.append(out)

    threads = [threading.Thread(target=_worker, args=(t,)) for t in ("X", "Y", "Z")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sum(1 for o in outcomes if o.ok) == 1
    assert {o.reason for o in outcomes if not o.ok} <= {"PLAYER_ALREADY_DRAFTED", "PICK_CONFLICT"}
    with LeagueRepo(db_path) as r:
        assert [row["player_id"] for row in r.list_draft_picks(gid)] == ["P1"]
