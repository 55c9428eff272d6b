"""
State Store - the engine's memory between ticks.

Keeps:
- Daily counters (bets placed, money lost, losing streak) for risk limits
- The bet journal, most recent entries only
- Match history feeding the trend analyzer

Everything lives in a single JSON document that is rewritten whole on
every save, via a temp file and an atomic rename, so a crash mid-write
never leaves half a state behind.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from autobettor.errors import StateReadError
from autobettor.markets.models import MatchObservation, Selection

logger = logging.getLogger(__name__)


class BetOutcome(Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    VOID = "void"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> str:
    return utc_now().date().isoformat()


def _expect(value, kind: type, what: str):
    if not isinstance(value, kind):
        raise ValueError(f"{what} must be a {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class DailyCounters:
    date: str = field(default_factory=today_utc)
    cumulative_loss: float = 0.0
    bets_placed: int = 0
    consecutive_losses: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "loss": self.cumulative_loss,
            "betsCount": self.bets_placed,
            "consecutiveLosses": self.consecutive_losses,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyCounters":
        _expect(data, dict, "daily")
        return cls(
            date=str(data.get("date", "")),
            cumulative_loss=float(data.get("loss", 0.0)),
            bets_placed=int(data.get("betsCount", 0)),
            consecutive_losses=int(data.get("consecutiveLosses", 0)),
        )


@dataclass
class BetRecord:
    timestamp: str
    match_id: str
    selection: Selection
    odds: float
    stake: float
    outcome: BetOutcome = BetOutcome.PENDING
    result_message: str = ""

    @property
    def date(self) -> str:
        return self.timestamp[:10]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "matchId": self.match_id,
            "selection": self.selection.value,
            "odds": self.odds,
            "stake": self.stake,
            "outcome": self.outcome.value,
            "resultMessage": self.result_message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BetRecord":
        _expect(data, dict, "bet")
        return cls(
            timestamp=str(data["timestamp"]),
            match_id=str(data.get("matchId", "")),
            selection=Selection(data["selection"]),
            odds=float(data.get("odds", 0.0)),
            stake=float(data.get("stake", 0.0)),
            outcome=BetOutcome(data.get("outcome", BetOutcome.PENDING.value)),
            result_message=str(data.get("resultMessage", "")),
        )


@dataclass
class State:
    bets: list[BetRecord] = field(default_factory=list)
    daily: DailyCounters = field(default_factory=DailyCounters)
    history_matches: list[MatchObservation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "bets": [b.to_dict() for b in self.bets],
            "daily": self.daily.to_dict(),
            "historyMatches": [m.to_dict() for m in self.history_matches],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "State":
        daily = data.get("daily")
        bets = _expect(data.get("bets", []), list, "bets")
        history = _expect(data.get("historyMatches", []), list, "historyMatches")
        return cls(
            bets=[BetRecord.from_dict(b) for b in bets],
            daily=DailyCounters.from_dict(daily) if daily else DailyCounters(),
            history_matches=[MatchObservation.from_dict(m) for m in history],
        )

    def record_history(self, matches: list[MatchObservation], limit: int = 300):
        """Append this cycle's observations, keeping the newest ``limit``."""
        self.history_matches = (self.history_matches + list(matches))[-limit:]

    def record_bet(self, bet: BetRecord, retention: int = 300):
        self.bets = (self.bets + [bet])[-retention:]
        self.daily.bets_placed += 1


def reset_daily_if_needed(state: State, today: Optional[str] = None) -> bool:
    """Zero the daily counters when they belong to another day.

    Returns True when a reset happened, so the caller knows to persist.
    """
    today = today or today_utc()
    if state.daily.date == today:
        return False
    logger.info("New day %s (counters were for %s). Resetting daily limits.",
                today, state.daily.date or "unknown")
    state.daily = DailyCounters(date=today)
    return True


def settle_bet(state: State, index: int, outcome: BetOutcome) -> BetRecord:
    """Resolve a pending bet exactly once.

    A loss on a bet placed on the counters' day adds its stake to the daily
    loss and extends the losing streak; a win ends the streak. Void bets
    change nothing but the record.
    """
    if outcome is BetOutcome.PENDING:
        raise ValueError("Cannot settle a bet back to pending")
    try:
        bet = state.bets[index]
    except IndexError:
        raise ValueError(f"No bet at index {index}") from None
    if bet.outcome is not BetOutcome.PENDING:
        raise ValueError(f"Bet {index} is already settled ({bet.outcome.value})")

    bet.outcome = outcome
    counts_today = bet.date == state.daily.date
    if outcome is BetOutcome.LOST:
        if counts_today:
            state.daily.cumulative_loss += bet.stake
        state.daily.consecutive_losses += 1
    elif outcome is BetOutcome.WON:
        state.daily.consecutive_losses = 0

    logger.info("Settled bet %d on %s: %s", index, bet.match_id, outcome.value)
    return bet


class StateStore:
    """
    JSON file backed state.

    ``load`` never raises: a missing file is initialised, an unreadable one
    is replaced in memory by a fresh state and the problem is kept on
    ``last_error`` for the caller to report. ``save`` failures are logged
    and swallowed; the in-memory state stays authoritative.
    """

    def __init__(self, path):
        self.path = Path(path)
        self.last_error: Optional[StateReadError] = None

    def load(self) -> State:
        self.last_error = None
        if not self.path.exists():
            state = State()
            self.save(state)
            return state

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("state root is not an object")
            return State.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            self.last_error = StateReadError(f"Could not read {self.path}: {e}")
            logger.error("ERROR reading state: %s", e)
            return State()

    def save(self, state: State) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state.to_dict(), f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
            return True
        except OSError as e:
            logger.error("ERROR writing state: %s", e)
            return False
