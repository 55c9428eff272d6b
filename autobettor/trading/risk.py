"""
Risk Gatekeeper - the adult in the room.

Every candidate has to get past four checks before it reaches the
Executor:

1. Daily bet count below MAX_BETS_PER_DAY
2. Daily loss below MAX_DAILY_LOSS
3. Stake at most MAX_STAKE (oversized stakes are clamped, not refused)
4. Live balance at least MIN_BALANCE and at least the stake

A veto is a normal outcome, not an error.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from autobettor.config import RiskConfig
from autobettor.strategies.rules import Candidate
from autobettor.trading.state import State

logger = logging.getLogger(__name__)

REASON_BET_LIMIT = "daily bet limit reached"
REASON_LOSS_LIMIT = "daily loss limit reached"
REASON_INSUFFICIENT_BALANCE = "insufficient balance"
REASON_BALANCE_BELOW_STAKE = "insufficient balance for stake"
REASON_INVALID_STAKE = "invalid stake"


@dataclass
class Decision:
    allowed: bool
    stake: float = 0.0
    reason: Optional[str] = None
    clamped: bool = False

    @classmethod
    def allow(cls, stake: float, clamped: bool = False) -> "Decision":
        return cls(allowed=True, stake=stake, clamped=clamped)

    @classmethod
    def deny(cls, reason: str, stake: float = 0.0) -> "Decision":
        return cls(allowed=False, stake=stake, reason=reason)


class RiskGatekeeper:
    def __init__(self, config: RiskConfig):
        self.config = config

    def bet_limit_reached(self, state: State) -> bool:
        return state.daily.bets_placed >= self.config.max_bets_per_day

    def loss_limit_reached(self, state: State) -> bool:
        return state.daily.cumulative_loss >= self.config.max_daily_loss

    def clamp_stake(self, stake: float) -> float:
        return min(stake, self.config.max_stake)

    def authorize(self, state: State, candidate: Candidate, balance: float) -> Decision:
        cfg = self.config

        if self.bet_limit_reached(state):
            return Decision.deny(REASON_BET_LIMIT)
        if self.loss_limit_reached(state):
            return Decision.deny(REASON_LOSS_LIMIT)

        stake = self.clamp_stake(candidate.suggested_stake)
        clamped = stake < candidate.suggested_stake
        if clamped:
            logger.info("Stake %.2f clamped to MAX_STAKE %.2f",
                        candidate.suggested_stake, stake)
        if stake <= 0:
            return Decision.deny(REASON_INVALID_STAKE, stake)

        if balance < cfg.min_balance:
            return Decision.deny(REASON_INSUFFICIENT_BALANCE, stake)
        if balance < stake:
            return Decision.deny(REASON_BALANCE_BELOW_STAKE, stake)

        return Decision.allow(stake, clamped=clamped)
