"""
Trend Analyzer.

Counts how many wins each team has in the stored match history. Draws and
scores we can't read (matches still in play, blank cells) don't count for
anyone.
"""

from collections import Counter
from typing import Iterable

from autobettor.markets.models import MatchObservation, parse_score

TrendMap = dict[str, int]


def compute_trend(history: Iterable[MatchObservation]) -> TrendMap:
    trend: Counter = Counter()
    for match in history:
        goals = parse_score(match.score)
        if goals is None:
            continue
        home_goals, away_goals = goals
        if home_goals > away_goals:
            trend[match.home] += 1
        elif away_goals > home_goals:
            trend[match.away] += 1
    return dict(trend)
