"""
Strategy Evaluator - turns the odds board into bet candidates.

Two rule families, checked per match and per side (home/away, never the
draw):

1. Value Odds - the price alone is juicy enough (>= 3.0).
2. Trend      - the team has been winning (3+ wins in history) and the
                bookie still prices it in the comfortable 1.5-2.5 band.

Order matters. Candidates come out in match order, and within a match as
value-home, value-away, trend-home, trend-away. The orchestrator only ever
acts on the first one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from autobettor.config import StrategyConfig
from autobettor.markets.models import MatchObservation, Selection, parse_odds
from autobettor.strategies.trend import TrendMap, compute_trend

if TYPE_CHECKING:
    from autobettor.trading.state import State

SIDES = (Selection.HOME, Selection.AWAY)


class RuleKind(Enum):
    VALUE = "value"
    TREND = "trend"


@dataclass
class Candidate:
    match: MatchObservation
    selection: Selection
    odds: float
    reason: str
    suggested_stake: float
    rule: RuleKind = RuleKind.VALUE

    @property
    def summary(self) -> str:
        return (f"{self.match.label} ({self.selection.value} @ {self.odds:g}) "
                f"- {self.reason}")


class StrategyEvaluator:
    def __init__(self, config: Optional[StrategyConfig] = None):
        self.config = config or StrategyConfig()

    def evaluate(self, state: "State",
                 matches: Iterable[MatchObservation]) -> list[Candidate]:
        """Build the ordered candidate list for this cycle's matches.

        The stored match history feeds the trend map; ``matches`` are the
        fixtures on the board right now.
        """
        trend = compute_trend(state.history_matches)
        candidates: list[Candidate] = []
        for match in matches:
            odds = {side: parse_odds(match.odds.for_selection(side)) for side in SIDES}
            candidates.extend(self._value_candidates(match, odds))
            candidates.extend(self._trend_candidates(match, odds, trend))
        return candidates

    def _value_candidates(self, match: MatchObservation,
                          odds: dict[Selection, Optional[float]]) -> list[Candidate]:
        threshold = self.config.value_min_odds
        out = []
        for side in SIDES:
            price = odds[side]
            if price is not None and price >= threshold:
                out.append(Candidate(
                    match=match,
                    selection=side,
                    odds=price,
                    reason=f"Value Odds ({side.value.title()} >= {threshold:g})",
                    suggested_stake=self.config.unit_stake,
                    rule=RuleKind.VALUE,
                ))
        return out

    def _trend_candidates(self, match: MatchObservation,
                          odds: dict[Selection, Optional[float]],
                          trend: TrendMap) -> list[Candidate]:
        cfg = self.config
        out = []
        for side in SIDES:
            team = ((match.home if side is Selection.HOME else match.away) or "").strip()
            wins = trend.get(team, 0)
            price = odds[side]
            if wins < cfg.trend_min_wins or price is None:
                continue
            if cfg.trend_min_odds <= price <= cfg.trend_max_odds:
                out.append(Candidate(
                    match=match,
                    selection=side,
                    odds=price,
                    reason=f"Trend: {team} won last {wins}",
                    suggested_stake=cfg.unit_stake,
                    rule=RuleKind.TREND,
                ))
        return out
