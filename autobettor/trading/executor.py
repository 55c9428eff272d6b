"""
Bet Executor - where a decision becomes a wager.

Supports two modes:
- Dry run: walk the whole placement flow, stop short of confirming
- Live: actually submit the bet slip

The executor re-checks the wallet right before it commits, even though
the gatekeeper already did. It is called at most once per cycle and never
retried by the engine.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests

from autobettor.config import SiteConfig
from autobettor.errors import ExecError, ObserveError
from autobettor.markets.observer import Observer
from autobettor.strategies.rules import Candidate
from autobettor.trading.state import BetOutcome

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    confirmed: bool
    message: str
    outcome: Optional[BetOutcome] = None
    mode: str = "live"  # "live" or "dry_run"


class Executor(ABC):
    @abstractmethod
    def place_bet(self, candidate: Candidate, stake: float,
                  dry_run: bool = False) -> ExecutionResult:
        """Submit ``stake`` on ``candidate.selection``. Raises ExecError."""


class GatewayExecutor(Executor):
    """
    Executor backed by the same scraping gateway as ``GatewayObserver``.

      POST /betslip          {"match", "href", "selection"} -> {"ok", "message"}
      POST /betslip/confirm  {"stake"} -> {"ok", "message", "outcome"?}
    """

    def __init__(self, config: SiteConfig, observer: Observer,
                 session: Optional[requests.Session] = None):
        self.base_url = config.api_url.rstrip("/")
        self.timeout = config.request_timeout
        self.observer = observer
        self.session = session or requests.Session()

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = self.session.post(
                f"{self.base_url}{path}", json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise ExecError(f"POST {path} timed out after {self.timeout:.0f}s") from e
        except requests.RequestException as e:
            raise ExecError(f"POST {path} failed: {e}") from e
        except ValueError as e:
            raise ExecError(f"POST {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ExecError(f"Unexpected POST {path} payload")
        return data

    def place_bet(self, candidate: Candidate, stake: float,
                  dry_run: bool = False) -> ExecutionResult:
        mode = "dry_run" if dry_run else "live"
        match = candidate.match

        picked = self._post("/betslip", {
            "match": match.label,
            "href": match.href,
            "selection": candidate.selection.value,
        })
        if not picked.get("ok"):
            return ExecutionResult(False, picked.get("message") or "Odds button not found",
                                   mode=mode)

        try:
            balance = self.observer.current_balance()
        except ObserveError as e:
            raise ExecError(f"Balance check failed: {e}") from e

        logger.debug("Balance: %.2f, Stake: %.2f", balance, stake)
        if balance < stake:
            return ExecutionResult(False, "Insufficient Balance", mode=mode)

        if dry_run:
            return ExecutionResult(
                True,
                f"DRY RUN: Simulated bet on {candidate.selection.value} @ {candidate.odds:g}",
                mode=mode,
            )

        confirmed = self._post("/betslip/confirm", {"stake": stake})
        if not confirmed.get("ok"):
            return ExecutionResult(False, confirmed.get("message") or "Confirm button not found",
                                   mode=mode)

        outcome = None
        if confirmed.get("outcome"):
            try:
                outcome = BetOutcome(confirmed["outcome"])
            except ValueError:
                logger.warning("Ignoring unknown outcome %r", confirmed["outcome"])

        return ExecutionResult(True, confirmed.get("message") or "Bet Confirmed",
                               outcome=outcome, mode=mode)
