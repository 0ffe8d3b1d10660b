from types import SimpleNamespace

import pytest

from copabet.utils.scoring import (
    FINISHED,
    KNOCKOUT_STAGES,
    SCHEDULED,
    ScoreResult,
    calculate_bet_points,
    is_knockout_stage,
)


def finished(home, away, group="Group A", penalty_winner=None):
    return SimpleNamespace(
        status=FINISHED,
        group=group,
        home_team="Brazil",
        away_team="Argentina",
        home_score=home,
        away_score=away,
        penalty_winner=penalty_winner,
    )


def bet(home, away, penalty_winner=None):
    return SimpleNamespace(home_score=home, away_score=away, penalty_winner=penalty_winner)


def test_exact_score_group_stage():
    assert calculate_bet_points(bet(2, 1), finished(2, 1)) == (10, ["Exact score"])


def test_exact_score_knockout_correct_advancer():
    match = finished(1, 1, group="Quarter-Final", penalty_winner="Brazil")
    result = calculate_bet_points(bet(1, 1, "Brazil"), match)
    assert result == (10, ["Exact score + correct advancer"])


def test_exact_score_knockout_wrong_advancer():
    match = finished(1, 1, group="Quarter-Final", penalty_winner="Brazil")
    result = calculate_bet_points(bet(1, 1, "Argentina"), match)
    assert result == (7, ["Exact score (wrong advancer)"])


def test_exact_score_knockout_without_advancer_prediction():
    match = finished(1, 1, group="Final", penalty_winner="Brazil")
    assert calculate_bet_points(bet(1, 1), match) == (7, ["Exact score (wrong advancer)"])


def test_correct_winner_and_away_goals():
    result = calculate_bet_points(bet(2, 0), finished(3, 0))
    assert result == (8, ["Correct winner", "Away team goals"])


def test_correct_draw_in_group_stage():
    assert calculate_bet_points(bet(0, 0), finished(1, 1)) == (2, ["Correct draw"])


def test_scheduled_match_scores_nothing():
    match = finished(2, 1)
    match.status = SCHEDULED
    assert calculate_bet_points(bet(2, 1), match) == (0, [])


def test_missing_final_score_scores_nothing():
    assert calculate_bet_points(bet(0, 0), finished(None, 0)) == (0, [])
    assert calculate_bet_points(bet(0, 0), finished(0, None)) == (0, [])


def test_knockout_draw_without_recorded_decider_falls_back_to_exact_score():
    match = finished(2, 2, group="Semi-Final", penalty_winner=None)
    assert calculate_bet_points(bet(2, 2, "Brazil"), match) == (10, ["Exact score"])


def test_wrong_outcome_with_one_team_goals():
    assert calculate_bet_points(bet(1, 2), finished(1, 0)) == (5, ["Home team goals"])


def test_total_goals_only():
    assert calculate_bet_points(bet(0, 3), finished(2, 1)) == (1, ["Total goals"])


def test_no_category_matches():
    assert calculate_bet_points(bet(0, 2), finished(3, 0)) == (0, [])


def test_advancer_bonus_stacks_on_non_exact_draw():
    match = finished(1, 1, group="Round of 16", penalty_winner="Argentina")
    result = calculate_bet_points(bet(2, 2, "Argentina"), match)
    assert result == (5, ["Correct draw", "Correct advancer"])


def test_advancer_bonus_needs_matching_pick():
    match = finished(1, 1, group="Round of 16", penalty_winner="Argentina")
    assert calculate_bet_points(bet(0, 0, "Brazil"), match) == (2, ["Correct draw"])


def test_no_advancer_bonus_outside_knockout():
    match = finished(1, 1, group="Group B", penalty_winner="Argentina")
    assert calculate_bet_points(bet(0, 0, "Argentina"), match) == (2, ["Correct draw"])


def test_reasons_follow_evaluation_order():
    assert calculate_bet_points(bet(3, 0), finished(3, 1)) == (
        8,
        ["Correct winner", "Home team goals"],
    )
    assert calculate_bet_points(bet(3, 1), finished(2, 2)) == (1, ["Total goals"])
    assert calculate_bet_points(bet(2, 3), finished(1, 4)) == (
        4,
        ["Correct winner", "Total goals"],
    )


def test_result_is_a_score_result():
    result = calculate_bet_points(bet(2, 1), finished(2, 1))
    assert isinstance(result, ScoreResult)
    assert result.points == 10
    assert result.reasons == ["Exact score"]


def test_scoring_is_deterministic():
    match = finished(1, 1, group="Final", penalty_winner="Brazil")
    first = calculate_bet_points(bet(0, 0, "Brazil"), match)
    second = calculate_bet_points(bet(0, 0, "Brazil"), match)
    assert first == second


@pytest.mark.parametrize("stage", KNOCKOUT_STAGES)
def test_knockout_stages(stage):
    assert is_knockout_stage(stage)


@pytest.mark.parametrize("stage", ["Group A", "Group H", "Third Place", ""])
def test_group_stages(stage):
    assert not is_knockout_stage(stage)


def test_non_exact_bets_never_exceed_bound():
    for match_home in range(4):
        for match_away in range(4):
            match = finished(
                match_home,
                match_away,
                group="Final",
                penalty_winner="Brazil" if match_home == match_away else None,
            )
            for bet_home in range(4):
                for bet_away in range(4):
                    if (bet_home, bet_away) == (match_home, match_away):
                        continue
                    result = calculate_bet_points(bet(bet_home, bet_away, "Brazil"), match)
                    assert 0 <= result.points <= 17
                    assert not {"Correct draw", "Correct winner"} <= set(result.reasons)
                    assert result.points == sum(
                        {
                            "Correct draw": 2,
                            "Correct winner": 3,
                            "Home team goals": 5,
                            "Away team goals": 5,
                            "Total goals": 1,
                            "Correct advancer": 3,
                        }[reason]
                        for reason in result.reasons
                    )
