import json

import pytest
import requests

from autobettor.config import SiteConfig, TelegramConfig
from autobettor.errors import ConfigError, ExecError, LoginError, NotifyError, ObserveError
from autobettor.markets.models import Selection
from autobettor.markets.observer import GatewayObserver
from autobettor.notify import NullNotifier, TelegramNotifier, build_notifier
from autobettor.strategies.rules import Candidate
from autobettor.trading.executor import GatewayExecutor
from autobettor.trading.state import BetOutcome
from tests.conftest import FakeObserver, make_match


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.payload = payload
        self.status_code = status
        self.content = b"" if payload is None else json.dumps(payload).encode()

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.headers = {}
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, timeout, kwargs.get("json")))
        path = url.split("://", 1)[-1].split("/", 1)[-1]
        answer = self.routes[(method, "/" + path)]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


def site(**overrides):
    values = dict(api_url="http://gateway:8000/", phone="0241234567", password="pw", timeout_s=30)
    values.update(overrides)
    return SiteConfig(**values)


def test_timeout_is_capped_at_sixty_seconds():
    assert site(timeout_s=600).request_timeout == 60


def test_list_matches_parses_rows():
    session = FakeSession({("GET", "/matches"): FakeResponse([
        {"home": "A", "away": "B", "score": "1-0", "odds": {"home": "2.1", "draw": "3.0", "away": "3.9"}},
        {"home": None, "away": None},
        "junk",
    ])})
    matches = GatewayObserver(site(), session=session).list_matches()

    assert len(matches) == 1
    assert matches[0].odds.away == "3.9"
    method, url, timeout, _ = session.requests[0]
    assert url == "http://gateway:8000/matches"
    assert timeout == 30


def test_list_matches_skips_rows_with_malformed_odds():
    session = FakeSession({("GET", "/matches"): FakeResponse([
        {"home": "A", "away": "B", "odds": "3.5"},
        {"home": "C", "away": "D", "odds": {"home": "3.2"}},
    ])})
    matches = GatewayObserver(site(), session=session).list_matches()

    assert [m.home for m in matches] == ["C"]


def test_balance_payload_not_an_object():
    session = FakeSession({("GET", "/balance"): FakeResponse([])})
    with pytest.raises(ObserveError):
        GatewayObserver(site(), session=session).current_balance()


@pytest.mark.parametrize("routes", [
    {("GET", "/session/login"): FakeResponse(["loggedIn"])},
    {("GET", "/session/login"): FakeResponse({"loggedIn": False}),
     ("POST", "/login"): FakeResponse("ok")},
])
def test_login_payload_not_an_object(routes):
    with pytest.raises(LoginError):
        GatewayObserver(site(), session=FakeSession(routes)).login()


def test_timeout_becomes_observe_error():
    session = FakeSession({("GET", "/matches"): requests.Timeout("slow")})
    with pytest.raises(ObserveError, match="timed out"):
        GatewayObserver(site(), session=session).list_matches()


def test_login_skipped_when_already_logged_in():
    session = FakeSession({("GET", "/session/login"): FakeResponse({"loggedIn": True})})
    GatewayObserver(site(), session=session).login()
    assert len(session.requests) == 1


def test_login_without_credentials():
    session = FakeSession({("GET", "/session/login"): FakeResponse({"loggedIn": False})})
    with pytest.raises(ConfigError):
        GatewayObserver(site(phone="", password=""), session=session).login()


def test_login_rejected():
    session = FakeSession({
        ("GET", "/session/login"): FakeResponse({"loggedIn": False}),
        ("POST", "/login"): FakeResponse({"loggedIn": False}),
    })
    with pytest.raises(LoginError):
        GatewayObserver(site(), session=session).login()


def test_balance_parsing():
    session = FakeSession({("GET", "/balance"): FakeResponse({"balance": "GHS 12.40"})})
    assert GatewayObserver(site(), session=session).current_balance() == 12.4


def test_unreadable_balance():
    session = FakeSession({("GET", "/balance"): FakeResponse({"balance": "--"})})
    with pytest.raises(ObserveError):
        GatewayObserver(site(), session=session).current_balance()


def test_close_failure_is_logged_only():
    session = FakeSession({("DELETE", "/session"): FakeResponse(status=502)})
    GatewayObserver(site(), session=session).close()


def _candidate():
    match = make_match("A", "B", home_odds="3.5", href="/event/9")
    return Candidate(match, Selection.HOME, 3.5, "Value Odds (Home >= 3)", 1.0)


def test_dry_run_never_confirms():
    session = FakeSession({("POST", "/betslip"): FakeResponse({"ok": True})})
    executor = GatewayExecutor(site(), FakeObserver(balance=10), session=session)

    result = executor.place_bet(_candidate(), 1.0, dry_run=True)

    assert result.confirmed
    assert result.mode == "dry_run"
    assert result.message.startswith("DRY RUN")
    assert [r[1] for r in session.requests] == ["http://gateway:8000/betslip"]
    assert session.requests[0][3]["href"] == "/event/9"


def test_live_bet_confirmed_with_outcome():
    session = FakeSession({
        ("POST", "/betslip"): FakeResponse({"ok": True}),
        ("POST", "/betslip/confirm"): FakeResponse({"ok": True, "message": "Bet Confirmed",
                                                    "outcome": "won"}),
    })
    executor = GatewayExecutor(site(), FakeObserver(balance=10), session=session)

    result = executor.place_bet(_candidate(), 2.0)

    assert result.confirmed
    assert result.outcome is BetOutcome.WON
    assert session.requests[-1][3] == {"stake": 2.0}


def test_executor_rechecks_balance():
    session = FakeSession({("POST", "/betslip"): FakeResponse({"ok": True})})
    executor = GatewayExecutor(site(), FakeObserver(balance=0.5), session=session)

    result = executor.place_bet(_candidate(), 1.0)

    assert not result.confirmed
    assert result.message == "Insufficient Balance"


def test_executor_balance_check_on_malformed_payload():
    session = FakeSession({
        ("POST", "/betslip"): FakeResponse({"ok": True}),
        ("GET", "/balance"): FakeResponse([]),
    })
    observer = GatewayObserver(site(), session=session)
    executor = GatewayExecutor(site(), observer, session=session)

    with pytest.raises(ExecError):
        executor.place_bet(_candidate(), 1.0)


def test_betslip_payload_not_an_object():
    session = FakeSession({("POST", "/betslip"): FakeResponse(["ok"])})
    executor = GatewayExecutor(site(), FakeObserver(), session=session)
    with pytest.raises(ExecError):
        executor.place_bet(_candidate(), 1.0)


def test_missing_odds_button():
    session = FakeSession({("POST", "/betslip"): FakeResponse({"ok": False})})
    executor = GatewayExecutor(site(), FakeObserver(), session=session)
    assert executor.place_bet(_candidate(), 1.0).message == "Odds button not found"


def test_transport_error_becomes_exec_error():
    session = FakeSession({("POST", "/betslip"): requests.ConnectionError("reset")})
    executor = GatewayExecutor(site(), FakeObserver(), session=session)
    with pytest.raises(ExecError):
        executor.place_bet(_candidate(), 1.0)


def test_telegram_message():
    session = FakeSession({("POST", "/botTOKEN/sendMessage"): FakeResponse({"ok": True})})
    TelegramNotifier(TelegramConfig(bot_token="TOKEN", chat_id="42"), session=session).send("hi")
    _, url, _, payload = session.requests[0]
    assert url == "https://api.telegram.org/botTOKEN/sendMessage"
    assert payload == {"chat_id": "42", "text": "hi", "parse_mode": "HTML"}


def test_telegram_failure_raises_notify_error():
    session = FakeSession({("POST", "/botTOKEN/sendMessage"): FakeResponse(status=401)})
    notifier = TelegramNotifier(TelegramConfig(bot_token="TOKEN", chat_id="42"), session=session)
    with pytest.raises(NotifyError):
        notifier.send("hi")


def test_unconfigured_telegram_falls_back_to_null():
    assert isinstance(build_notifier(TelegramConfig(bot_token="", chat_id="")), NullNotifier)
