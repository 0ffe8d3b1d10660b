from types import SimpleNamespace

from copabet.utils.scoring import FINISHED, SCHEDULED
from copabet.utils.standings import (
    build_leaderboard,
    calculate_user_points,
    recalculate_standings,
)


def match(match_id, home=None, away=None, status=FINISHED, group="Group A", penalty_winner=None):
    return SimpleNamespace(
        id=match_id,
        status=status,
        group=group,
        home_score=home,
        away_score=away,
        penalty_winner=penalty_winner,
    )


def bet(user_id, match_id, home, away, penalty_winner=None):
    return SimpleNamespace(
        user_id=user_id,
        match_id=match_id,
        home_score=home,
        away_score=away,
        penalty_winner=penalty_winner,
    )


def user(user_id, points=0):
    return SimpleNamespace(id=user_id, points=points)


def league():
    matches = [
        match(1, 2, 1),
        match(2, 1, 1, group="Final", penalty_winner="Brazil"),
        match(3, status=SCHEDULED),
    ]
    bets = [
        bet(10, 1, 2, 1),  # exact: 10
        bet(10, 2, 1, 1, "Brazil"),  # exact + advancer: 10
        bet(10, 3, 5, 0),  # scheduled: 0
        bet(20, 1, 1, 0),  # winner: 3
        bet(20, 2, 0, 0, "Argentina"),  # draw: 2
        bet(30, 99, 1, 0),  # deleted match: 0
    ]
    users = [user(10), user(20), user(30, points=42)]
    return matches, bets, users


def test_points_sum_bets_on_finished_matches():
    matches, bets, users = league()
    assert calculate_user_points(matches, bets, users) == {10: 20, 20: 5, 30: 0}


def test_recalculate_replaces_stale_points():
    matches, bets, users = league()
    recalculate_standings(matches, bets, users)
    assert [u.points for u in users] == [20, 5, 0]


def test_recalculate_is_idempotent():
    matches, bets, users = league()
    recalculate_standings(matches, bets, users)
    first = [u.points for u in users]
    recalculate_standings(matches, bets, users)
    assert [u.points for u in users] == first


def test_bets_of_unknown_users_are_ignored():
    matches, bets, users = league()
    bets.append(bet(77, 1, 2, 1))
    assert 77 not in calculate_user_points(matches, bets, users)


def test_user_without_bets_gets_zero():
    totals = calculate_user_points([match(1, 1, 0)], [], [user(1, points=9)])
    assert totals == {1: 0}


def test_deleting_a_match_removes_its_points():
    matches, bets, users = league()
    recalculate_standings(matches[1:], bets, users)
    assert [u.points for u in users] == [10, 2, 0]


def test_leaderboard_orders_by_points_descending():
    board = build_leaderboard([user(1, 5), user(2, 12), user(3, 8)])
    assert [(e["rank"], e["user"].id, e["points"]) for e in board] == [
        (1, 2, 12),
        (2, 3, 8),
        (3, 1, 5),
    ]


def test_leaderboard_ties_keep_listing_order():
    board = build_leaderboard([user(4, 3), user(1, 7), user(9, 3), user(2, 7)])
    assert [e["user"].id for e in board] == [1, 2, 4, 9]


def test_empty_leaderboard():
    assert build_leaderboard([]) == []
