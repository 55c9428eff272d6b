"""
Observer - our eyes on the betting site.

The engine never talks to the site directly. It asks an Observer to log
in, list the matches on the virtual football board and report the live
wallet balance. Every call is bounded by a hard timeout and fails with a
typed error instead of hanging.

``GatewayObserver`` talks JSON to a scraping gateway that owns the
browser session. Anything that implements ``Observer`` can be plugged in
instead.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from autobettor.config import SiteConfig
from autobettor.errors import ConfigError, LoginError, ObserveError
from autobettor.markets.models import MatchObservation, parse_amount

logger = logging.getLogger(__name__)


class Observer(ABC):
    """Read-only view of the remote site."""

    def open(self) -> None:
        """Acquire a session for one cycle. Raises ObserveError."""

    def close(self) -> None:
        """Release whatever ``open`` acquired."""

    @abstractmethod
    def login(self) -> None:
        """Make sure we are logged in. Raises ConfigError or LoginError."""

    @abstractmethod
    def list_matches(self) -> list[MatchObservation]:
        """Current matches with odds. Raises ObserveError."""

    @abstractmethod
    def current_balance(self) -> float:
        """Live wallet balance. Raises ObserveError."""


class GatewayObserver(Observer):
    """
    Observer backed by a scraping gateway's HTTP API.

    Endpoints used:
      POST /session        open a browser session
      DELETE /session      close it
      GET  /session/login  {"loggedIn": bool}
      POST /login          {"phone", "password"} -> {"loggedIn": bool}
      GET  /matches        [{"home", "away", "score", "odds": {...}, "href"}]
      GET  /balance        {"balance": "GHS 12.40"}
    """

    def __init__(self, config: SiteConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.api_url.rstrip("/")
        self.timeout = config.request_timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _request(self, method: str, path: str, error_cls=ObserveError, **kwargs):
        try:
            response = self.session.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.Timeout as e:
            raise error_cls(f"{method} {path} timed out after {self.timeout:.0f}s") from e
        except requests.RequestException as e:
            raise error_cls(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise error_cls(f"{method} {path} returned invalid JSON") from e

    def open(self) -> None:
        self._request("POST", "/session")

    def close(self) -> None:
        try:
            self._request("DELETE", "/session")
        except ObserveError as e:
            logger.warning("Could not close site session: %s", e)

    def login(self) -> None:
        status = self._request("GET", "/session/login", error_cls=LoginError)
        if not isinstance(status, dict):
            raise LoginError("Unexpected /session/login payload")
        if status.get("loggedIn"):
            logger.debug("Already logged in.")
            return

        if not self.config.has_credentials:
            raise ConfigError("Missing SITE_PHONE / SITE_PASSWORD credentials.")

        logger.debug("Attempting login...")
        result = self._request(
            "POST",
            "/login",
            error_cls=LoginError,
            json={"phone": self.config.phone, "password": self.config.password},
        )
        if not isinstance(result, dict):
            raise LoginError("Unexpected /login payload")
        if not result.get("loggedIn"):
            raise LoginError("Balance not visible after login.")
        logger.debug("Login successful.")

    def list_matches(self) -> list[MatchObservation]:
        data = self._request("GET", "/matches")
        if not isinstance(data, list):
            raise ObserveError("Unexpected /matches payload")

        matches = []
        for row in data:
            if not isinstance(row, dict):
                continue
            try:
                match = MatchObservation.from_dict(row)
            except ValueError as e:
                logger.debug("Skipping malformed match row: %s", e)
                continue
            if match.home or match.away:
                matches.append(match)

        logger.debug("Found %d matches.", len(matches))
        return matches

    def current_balance(self) -> float:
        data = self._request("GET", "/balance")
        if not isinstance(data, dict):
            raise ObserveError("Unexpected /balance payload")
        balance = parse_amount(str(data.get("balance", "")))
        if balance is None:
            raise ObserveError(f"Unreadable balance: {data.get('balance')!r}")
        return balance
