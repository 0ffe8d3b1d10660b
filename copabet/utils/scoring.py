"""
Scoring Engine for CopaBet

This module handles scoring calculations for a single bet.
For league-wide point totals and the leaderboard, see copabet/utils/standings.py
"""

from collections import namedtuple

SCHEDULED = "SCHEDULED"
FINISHED = "FINISHED"

KNOCKOUT_STAGES = ("Round of 16", "Quarter-Final", "Semi-Final", "Final")

# Points per category
EXACT_SCORE_POINTS = 10
EXACT_SCORE_WRONG_ADVANCER_POINTS = 7
CORRECT_WINNER_POINTS = 3
CORRECT_DRAW_POINTS = 2
TEAM_GOALS_POINTS = 5
TOTAL_GOALS_POINTS = 1
CORRECT_ADVANCER_POINTS = 3

# Reason labels shown next to a scored bet
EXACT_SCORE = "Exact score"
EXACT_SCORE_CORRECT_ADVANCER = "Exact score + correct advancer"
EXACT_SCORE_WRONG_ADVANCER = "Exact score (wrong advancer)"
CORRECT_DRAW = "Correct draw"
CORRECT_WINNER = "Correct winner"
HOME_TEAM_GOALS = "Home team goals"
AWAY_TEAM_GOALS = "Away team goals"
TOTAL_GOALS = "Total goals"
CORRECT_ADVANCER = "Correct advancer"

ScoreResult = namedtuple("ScoreResult", ["points", "reasons"])


def is_knockout_stage(group):
    """Check if a stage label belongs to the elimination rounds"""
    return group in KNOCKOUT_STAGES


def _sign(value):
    return (value > 0) - (value < 0)


def calculate_bet_points(bet, match):
    """
    Calculate score for a single bet.

    An exact scoreline short-circuits every other category. On a knockout
    draw with a recorded penalty winner the exact score is worth 10 with the
    right advancer and 7 without it. Any other bet collects the categories
    below, in this order:

        correct draw (+2) or correct winner (+3)
        home team goals (+5)
        away team goals (+5)
        total goals (+1)
        correct advancer on a knockout draw (+3)

    Returns:
        ScoreResult(points, reasons); (0, []) while the match is unresolved

    Args:
        bet: object with home_score, away_score and penalty_winner
        match: object with status, group, home_score, away_score and penalty_winner
    """
    if (
        match.status != FINISHED
        or match.home_score is None
        or match.away_score is None
    ):
        return ScoreResult(0, [])

    match_home, match_away = match.home_score, match.away_score
    bet_home, bet_away = bet.home_score, bet.away_score

    # Only a knockout draw with a known decider has an advancer to guess
    decided_on_penalties = (
        is_knockout_stage(match.group)
        and match_home == match_away
        and bool(match.penalty_winner)
    )

    if bet_home == match_home and bet_away == match_away:
        if decided_on_penalties:
            if bet.penalty_winner == match.penalty_winner:
                return ScoreResult(EXACT_SCORE_POINTS, [EXACT_SCORE_CORRECT_ADVANCER])
            return ScoreResult(
                EXACT_SCORE_WRONG_ADVANCER_POINTS, [EXACT_SCORE_WRONG_ADVANCER]
            )
        return ScoreResult(EXACT_SCORE_POINTS, [EXACT_SCORE])

    points = 0
    reasons = []

    match_sign = _sign(match_home - match_away)
    if match_sign == _sign(bet_home - bet_away):
        if match_sign == 0:
            points += CORRECT_DRAW_POINTS
            reasons.append(CORRECT_DRAW)
        else:
            points += CORRECT_WINNER_POINTS
            reasons.append(CORRECT_WINNER)

    if bet_home == match_home:
        points += TEAM_GOALS_POINTS
        reasons.append(HOME_TEAM_GOALS)

    if bet_away == match_away:
        points += TEAM_GOALS_POINTS
        reasons.append(AWAY_TEAM_GOALS)

    if bet_home + bet_away == match_home + match_away:
        points += TOTAL_GOALS_POINTS
        reasons.append(TOTAL_GOALS)

    if decided_on_penalties and bet.penalty_winner == match.penalty_winner:
        points += CORRECT_ADVANCER_POINTS
        reasons.append(CORRECT_ADVANCER)

    return ScoreResult(points, reasons)
