from autobettor.strategies.trend import compute_trend
from tests.conftest import make_match


def test_three_home_wins():
    history = [
        make_match("A", "B", score="2-1"),
        make_match("A", "B", score="3-0"),
        make_match("A", "B", score="1-0"),
    ]
    assert compute_trend(history)["A"] == 3
    assert "B" not in compute_trend(history)


def test_away_wins_and_colon_scores():
    history = [
        make_match("A", "B", score="0:2"),
        make_match("C", "B", score="1-4"),
    ]
    assert compute_trend(history) == {"B": 2}


def test_draws_and_malformed_scores_count_for_nobody():
    history = [
        make_match("A", "B", score="1-1"),
        make_match("A", "B", score=None),
        make_match("A", "B", score="LIVE"),
        make_match("A", "B", score="2"),
    ]
    assert compute_trend(history) == {}


def test_does_not_mutate_input():
    history = [make_match("A", "B", score="2-0")]
    compute_trend(history)
    assert history[0].score == "2-0"
