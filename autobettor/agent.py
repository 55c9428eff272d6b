"""
The Agent - one scan/evaluate/act cycle.

Cycle:
1. Load state, reset daily counters on a new day
2. Stop early if today's bet limit is already used up
3. Open a site session, log in, read the board
4. Record the board into match history
5. Evaluate rules, take the FIRST candidate only
6. Ask the gatekeeper, then the executor
7. Persist, then notify

Every step that can fail ends the cycle with a reported outcome. Nothing
raised by a collaborator gets past ``run_cycle``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from datetime import datetime
from typing import Callable, Optional

from autobettor.config import BotConfig
from autobettor.errors import ConfigError, ExecError, NotifyError, ObserveError
from autobettor.markets.observer import Observer
from autobettor.notify import Notifier
from autobettor.strategies.rules import Candidate, StrategyEvaluator
from autobettor.trading.executor import ExecutionResult, Executor
from autobettor.trading.risk import Decision, RiskGatekeeper
from autobettor.trading.state import (
    BetOutcome,
    BetRecord,
    State,
    StateStore,
    reset_daily_if_needed,
    settle_bet,
    utc_now,
)

logger = logging.getLogger(__name__)


class CycleOutcome(Enum):
    LIMIT_EXCEEDED = "limit_exceeded"
    OBSERVE_FAILED = "observe_failed"
    LOGIN_FAILED = "login_failed"
    SCRAPE_FAILED = "scrape_failed"
    IDLE = "idle"
    VETOED = "vetoed"
    EXEC_FAILED = "exec_failed"
    DONE = "done"
    ERROR = "error"


@dataclass
class CycleReport:
    outcome: CycleOutcome
    message: str = ""
    matches_seen: int = 0
    candidates: int = 0
    candidate: Optional[Candidate] = None
    decision: Optional[Decision] = None
    result: Optional[ExecutionResult] = None


class BettingAgent:
    """
    The cycle orchestrator.

    Holds no state between cycles besides what is in the StateStore, so a
    process restart between ticks loses nothing.
    """

    def __init__(self, config: BotConfig, store: StateStore, observer: Observer,
                 executor: Executor, notifier: Notifier,
                 evaluator: Optional[StrategyEvaluator] = None,
                 gatekeeper: Optional[RiskGatekeeper] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.config = config
        self.store = store
        self.observer = observer
        self.executor = executor
        self.notifier = notifier
        self.evaluator = evaluator or StrategyEvaluator(config.strategy)
        self.gatekeeper = gatekeeper or RiskGatekeeper(config.risk)
        self.clock = clock
        self.cycle_count = 0

    def run_cycle(self) -> CycleReport:
        self.cycle_count += 1
        try:
            report = self._cycle()
        except Exception as e:  # last line of defence for the scheduler
            logger.exception("Error in scan: %s", e)
            report = CycleReport(CycleOutcome.ERROR, str(e))

        level = logging.WARNING if report.outcome in _FAILURES else logging.INFO
        logger.log(level, "Cycle #%d finished: %s%s", self.cycle_count,
                   report.outcome.value, f" ({report.message})" if report.message else "")
        return report

    def _cycle(self) -> CycleReport:
        # one reading per cycle: the daily reset and the bet timestamp must agree
        started = self.clock()
        state = self.store.load()
        if self.store.last_error:
            logger.warning("Starting from a fresh state: %s", self.store.last_error)

        if reset_daily_if_needed(state, started.date().isoformat()):
            self.store.save(state)

        if self.gatekeeper.bet_limit_reached(state):
            logger.info("Daily limit reached (%d bets).", state.daily.bets_placed)
            return CycleReport(CycleOutcome.LIMIT_EXCEEDED, "Daily limit reached")

        try:
            self.observer.open()
        except ObserveError as e:
            return CycleReport(CycleOutcome.OBSERVE_FAILED, str(e))

        try:
            return self._observe_and_act(state, started)
        finally:
            self.observer.close()

    def _observe_and_act(self, state: State, started: datetime) -> CycleReport:
        try:
            self.observer.login()
        except (ConfigError, ObserveError) as e:
            return CycleReport(CycleOutcome.LOGIN_FAILED, str(e))

        try:
            matches = self.observer.list_matches()
        except ObserveError as e:
            return CycleReport(CycleOutcome.SCRAPE_FAILED, str(e))
        logger.debug("Scraped %d matches.", len(matches))

        state.record_history(matches, self.config.history_limit)
        self.store.save(state)

        candidates = self.evaluator.evaluate(state, matches)
        if not candidates:
            logger.debug("No candidates found")
            return CycleReport(CycleOutcome.IDLE, "No candidates found",
                               matches_seen=len(matches))

        best = candidates[0]
        logger.info("🎯 Candidate: %s (%d found)", best.summary, len(candidates))
        report = CycleReport(CycleOutcome.DONE, matches_seen=len(matches),
                             candidates=len(candidates), candidate=best)

        try:
            balance = self.observer.current_balance()
        except ObserveError as e:
            report.outcome, report.message = CycleOutcome.OBSERVE_FAILED, str(e)
            return report

        decision = self.gatekeeper.authorize(state, best, balance)
        report.decision = decision
        if not decision.allowed:
            report.outcome, report.message = CycleOutcome.VETOED, decision.reason
            logger.warning("⛔ Vetoed %s: %s (balance %.2f)", best.match.label,
                           decision.reason, balance)
            self._notify(f"⛔ Vetoed: {best.summary}\nReason: {decision.reason} "
                         f"(balance {balance:.2f})")
            return report

        try:
            result = self.executor.place_bet(best, decision.stake, dry_run=self.config.dry_run)
        except ExecError as e:
            result = ExecutionResult(False, str(e),
                                     mode="dry_run" if self.config.dry_run else "live")
        report.result = result

        if not result.confirmed:
            report.outcome, report.message = CycleOutcome.EXEC_FAILED, result.message
            self._notify(f"🎯 Candidate: {best.summary}\n❌ Failed: {result.message}")
            return report

        self._record_bet(state, best, decision.stake, result, started)
        report.message = result.message
        self._notify(f"🎯 Candidate: {best.summary}\nStake: {decision.stake:g}\n"
                     f"✅ Result: {result.message}")
        return report

    def _record_bet(self, state: State, candidate: Candidate, stake: float,
                    result: ExecutionResult, placed_at: datetime):
        bet = BetRecord(
            timestamp=placed_at.isoformat(),
            match_id=candidate.match.match_id,
            selection=candidate.selection,
            odds=candidate.odds,
            stake=stake,
            result_message=result.message,
        )
        state.record_bet(bet, self.config.bet_retention)
        if result.outcome and result.outcome is not BetOutcome.PENDING:
            settle_bet(state, len(state.bets) - 1, result.outcome)
        self.store.save(state)

    def _notify(self, text: str):
        try:
            self.notifier.send(text)
        except NotifyError as e:
            logger.error("%s", e)


_FAILURES = {
    CycleOutcome.OBSERVE_FAILED,
    CycleOutcome.LOGIN_FAILED,
    CycleOutcome.SCRAPE_FAILED,
    CycleOutcome.EXEC_FAILED,
    CycleOutcome.ERROR,
}
