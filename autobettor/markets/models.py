"""
Match data as the Observer reports it.

Odds and scores arrive as free text scraped off the board ("3.50",
"@ 1,85", "2-1", "1:0"), so parsing is forgiving: anything that does not
make sense is treated as missing rather than as an error.
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

_NON_NUMERIC = re.compile(r"[^0-9.]")


class Selection(Enum):
    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


@dataclass
class MatchOdds:
    home: Optional[str] = None
    draw: Optional[str] = None
    away: Optional[str] = None

    def for_selection(self, selection: Selection) -> Optional[str]:
        return getattr(self, selection.value)


@dataclass
class MatchObservation:
    home: Optional[str]
    away: Optional[str]
    score: Optional[str] = None
    odds: MatchOdds = field(default_factory=MatchOdds)
    href: Optional[str] = None

    @property
    def match_id(self) -> str:
        if self.href:
            return self.href
        return f"{self.home or '?'} vs {self.away or '?'}"

    @property
    def label(self) -> str:
        return f"{self.home or '?'} vs {self.away or '?'}"

    def to_dict(self) -> dict:
        data = {
            "home": self.home,
            "away": self.away,
            "score": self.score,
            "odds": {
                "home": self.odds.home,
                "draw": self.odds.draw,
                "away": self.odds.away,
            },
        }
        if self.href:
            data["href"] = self.href
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "MatchObservation":
        if not isinstance(data, dict):
            raise ValueError(f"match must be an object, got {type(data).__name__}")
        odds = data.get("odds") or {}
        if not isinstance(odds, dict):
            raise ValueError(f"odds must be an object, got {type(odds).__name__}")
        return cls(
            home=_clean_text(data.get("home")),
            away=_clean_text(data.get("away")),
            score=_clean_text(data.get("score")),
            odds=MatchOdds(
                home=_clean_text(odds.get("home")),
                draw=_clean_text(odds.get("draw")),
                away=_clean_text(odds.get("away")),
            ),
            href=data.get("href"),
        )


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_odds(text: Optional[str]) -> Optional[float]:
    """Pull a decimal price out of free-form odds text.

    Everything but digits and dots is stripped first, so "@3.50" and
    " 3.50 " both give 3.5. A lone comma is a decimal comma ("1,85" is
    1.85); alongside a dot it is a thousands separator. Returns None when
    nothing finite remains.
    """
    if not text:
        return None
    text = str(text)
    if "," in text:
        text = text.replace(",", "") if "." in text else text.replace(",", ".")
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_score(text: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse "H-A" or "H:A" into a (home_goals, away_goals) pair."""
    if not text:
        return None
    parts = str(text).replace(":", "-").split("-")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None


def parse_amount(text: Optional[str]) -> Optional[float]:
    """Wallet balances are scraped the same way as odds ("GHS 12.40")."""
    return parse_odds(text)
