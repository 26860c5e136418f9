import pytest

from draft.errors import DraftNotFoundError, DraftUnavailableError
from draft.pool import build_pool, compute_average_points, resolve_player_pool, should_reset_pool


def test_pool_flags_for_the_viewing_parent(repo, make_game):
    gid = make_game(players=("Cara", "Abe", "Ben", "Dot"), restrictions=[("X", "Abe"), ("Y", "Ben")])
    repo.insert_draft_pick(game_id=gid, picked_by_profile_id="X", player_id="Cara", round_number=1, pick_number=1)

    pool = resolve_player_pool(repo, gid, "X")
    assert [e.name for e in pool] == ["Abe", "Ben", "Cara", "Dot"]
    assert pool.get("Abe").is_restricted
    assert not pool.get("Ben").is_restricted  # Y's restriction, not X's
    assert pool.get("Cara").is_drafted
    assert not pool.get("Dot").is_drafted
    assert [e.player_id for e in pool.list_legal()] == ["Ben", "Dot"]
    assert not pool.was_reset


def test_average_points_only_counts_completed_games(repo, make_game):
    gid = make_game(players=("P1", "P2", "P3"))
    goal = repo.add_scoring_rule("goal", 3)
    assist = repo.add_scoring_rule("assist", 1)
    repo.upsert_game("OLD", opponent_name="Bears", game_date="2026-10-01", status="completed")
    repo.upsert_game("LIVE", opponent_name="Owls", game_date="2026-10-11", status="live")
    repo.insert_game_log("OLD", "P1", goal)
    repo.insert_game_log("OLD", "P1", assist)
    repo.insert_game_log("LIVE", "P1", goal)
    repo.insert_game_log("LIVE", "P2", goal)

    pool = resolve_player_pool(repo, gid, "X")
    assert pool.get("P1").average_points == pytest.approx(2.0)
    assert pool.get("P2").average_points == 0.0
    assert pool.get("P3").average_points == 0.0


def test_compute_average_points_per_log_entry():
    rows = [
        {"player_id": "A", "points": 3},
        {"player_id": "A", "points": 0},
        {"player_id": "B", "points": None},
    ]
    assert compute_average_points(rows) == {"A": 1.5, "B": 0.0}


def test_exhausted_pool_is_reported_available_again(repo, make_game):
    gid = make_game(parents=("X", "Y"), players=("P1", "P2"))
    repo.insert_draft_pick(game_id=gid, picked_by_profile_id="X", player_id="P1", round_number=1, pick_number=1)
    repo.insert_draft_pick(game_id=gid, picked_by_profile_id="Y", player_id="P2", round_number=1, pick_number=2)

    pool = resolve_player_pool(repo, gid, "X")
    assert pool.was_reset
    assert [e.is_drafted for e in pool] == [False, False]
    assert len(pool.list_legal()) == 2
    # read-time only: the log is untouched
    assert pool.drafted_player_ids == frozenset({"P1", "P2"})
    assert len(repo.list_draft_picks(gid)) == 2


def test_reset_threshold_is_strictly_fewer_than_parents():
    assert should_reset_pool(undrafted_count=1, parent_count=2)
    assert not should_reset_pool(undrafted_count=2, parent_count=2)
    assert not should_reset_pool(undrafted_count=0, parent_count=0)

    pool = build_pool(
        game_id="G",
        viewer_id="X",
        attendance=[{"player_id": "P1", "name": "P1"}, {"player_id": "P2", "name": "P2"}],
        drafted_player_ids=["P1"],
        restricted_player_ids=[],
        average_points_by_player={},
        parent_count=1,
    )
    assert not pool.was_reset
    assert pool.get("P1").is_drafted


def test_pool_without_draft_order_never_resets(repo, make_game):
    gid = make_game(parents=(), players=("P1",))
    pool = resolve_player_pool(repo, gid, "X")
    assert not pool.was_reset
    assert pool.undrafted_count() == 1


def test_unknown_game(repo, make_game):
    make_game()
    with pytest.raises(DraftNotFoundError):
        resolve_player_pool(repo, "NOPE", "X")


def test_store_failure_is_a_retryable_error(repo, make_game):
    gid = make_game()
    repo.close()
    with pytest.raises(DraftUnavailableError) as ei:
        resolve_player_pool(repo, gid, "X")
    assert ei.value.code == "STORE_UNAVAILABLE"


def test_deactivated_player_stays_in_pool_marked_inactive(repo, make_game):
    gid = make_game()
    repo.deactivate_player("P2")
    pool = resolve_player_pool(repo, gid, "X")
    assert pool.get("P2").is_active is False
    assert pool.get("P1").is_active is True


def test_average_follows_game_status_changes(repo, make_game):
    gid = make_game()
    rule = repo.add_scoring_rule("goal", 4)
    repo.upsert_game("PAST", opponent_name="Bears", game_date="2026-10-04", status="live")
    repo.insert_game_log("PAST", "P1", rule)
    assert resolve_player_pool(repo, gid, "X").get("P1").average_points == 0.0

    repo.set_game_status("PAST", "completed")
    assert resolve_player_pool(repo, gid, "X").get("P1").average_points == pytest.approx(4.0)

    with pytest.raises(ValueError):
        repo.set_game_status("NOPE", "completed")
