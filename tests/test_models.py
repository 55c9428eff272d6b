import pytest

from autobettor.markets.models import MatchObservation, parse_amount, parse_odds, parse_score


@pytest.mark.parametrize("text,expected", [
    ("3.50", 3.5),
    (" 1.85 ", 1.85),
    ("@2.10", 2.1),
    ("1,85", 1.85),
    ("@ 1,85", 1.85),
    ("1,234.50", 1234.5),
    ("GHS 12.40", 12.4),
    ("", None),
    (None, None),
    ("-", None),
    ("1.2.3", None),
    ("N/A", None),
])
def test_parse_odds(text, expected):
    assert parse_odds(text) == expected


def test_parse_amount_reads_wallet_text():
    assert parse_amount("Balance: 7.25") == 7.25


@pytest.mark.parametrize("text,expected", [
    ("2-1", (2, 1)),
    ("0:3", (0, 3)),
    (" 1 - 1 ", (1, 1)),
    ("", None),
    (None, None),
    ("LIVE", None),
    ("2-", None),
    ("x-1", None),
])
def test_parse_score(text, expected):
    assert parse_score(text) == expected


def test_observation_from_dict_cleans_text():
    match = MatchObservation.from_dict({
        "home": " Arsenal ",
        "away": "Chelsea",
        "score": "",
        "odds": {"home": "2.10", "draw": None, "away": " 3.4 "},
    })
    assert match.home == "Arsenal"
    assert match.score is None
    assert match.odds.draw is None
    assert match.odds.away == "3.4"
    assert match.match_id == "Arsenal vs Chelsea"


def test_match_id_prefers_href():
    match = MatchObservation.from_dict({"home": "A", "away": "B", "href": "/event/42"})
    assert match.match_id == "/event/42"
    assert match.to_dict()["href"] == "/event/42"
