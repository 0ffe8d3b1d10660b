"""
Standings calculations for CopaBet

User points are a materialized view over matches and bets: they are always
recomputed from scratch, never adjusted incrementally. Callers must hold the
write lock of their store (one database transaction here) around a
recalculation so bets and matches cannot change underneath it.
"""

from copabet.utils.scoring import FINISHED, calculate_bet_points


def calculate_user_points(matches, bets, users):
    """
    Sum bet scores per user over finished matches.

    Bets whose match is scheduled or no longer exists, and bets of unknown
    users, contribute nothing.

    Returns:
        dict mapping user id to total points (every given user is present)
    """
    finished_matches = {m.id: m for m in matches if m.status == FINISHED}
    totals = {user.id: 0 for user in users}

    for bet in bets:
        if bet.user_id not in totals:
            continue
        match = finished_matches.get(bet.match_id)
        if match is None:
            continue
        totals[bet.user_id] += calculate_bet_points(bet, match).points

    return totals


def recalculate_standings(matches, bets, users):
    """Replace every user's points with a fresh total and return the users"""
    totals = calculate_user_points(matches, bets, users)
    for user in users:
        user.points = totals[user.id]
    return users


def build_leaderboard(users):
    """
    Rank users by points, highest first.

    Ties keep the order the users were given in (sorted() is stable).
    """
    ranked = sorted(users, key=lambda u: u.points or 0, reverse=True)
    return [
        {"rank": index + 1, "user": user, "points": user.points or 0}
        for index, user in enumerate(ranked)
    ]
