import pytest

from autobettor.agent import BettingAgent
from autobettor.config import BotConfig, RiskConfig, StrategyConfig
from autobettor.errors import NotifyError
from autobettor.markets.models import MatchObservation, MatchOdds
from autobettor.markets.observer import Observer
from autobettor.notify import Notifier
from autobettor.trading.executor import ExecutionResult, Executor
from autobettor.trading.state import StateStore


def make_match(home="A", away="B", score=None, home_odds=None, draw_odds=None,
               away_odds=None, href=None):
    return MatchObservation(
        home=home,
        away=away,
        score=score,
        odds=MatchOdds(home=home_odds, draw=draw_odds, away=away_odds),
        href=href,
    )


class FakeObserver(Observer):
    def __init__(self, matches=None, balance=100.0):
        self.matches = matches or []
        self.balance = balance
        self.calls = []
        self.errors = {}

    def _call(self, name):
        self.calls.append(name)
        if name in self.errors:
            raise self.errors[name]

    def open(self):
        self._call("open")

    def close(self):
        self.calls.append("close")

    def login(self):
        self._call("login")

    def list_matches(self):
        self._call("list_matches")
        return list(self.matches)

    def current_balance(self):
        self._call("current_balance")
        return self.balance


class FakeExecutor(Executor):
    def __init__(self, result=None, error=None):
        self.result = result or ExecutionResult(True, "Bet Confirmed")
        self.error = error
        self.calls = []

    def place_bet(self, candidate, stake, dry_run=False):
        self.calls.append((candidate, stake, dry_run))
        if self.error:
            raise self.error
        return self.result


class FakeNotifier(Notifier):
    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []

    def send(self, text):
        self.messages.append(text)
        if self.fail:
            raise NotifyError("chat unreachable")


@pytest.fixture
def config(tmp_path):
    return BotConfig(
        risk=RiskConfig(max_daily_loss=50, max_stake=5, min_balance=2, max_bets_per_day=30),
        strategy=StrategyConfig(),
        state_path=str(tmp_path / "state.json"),
        dry_run=False,
        debug=False,
    )


@pytest.fixture
def store(config):
    return StateStore(config.state_path)


@pytest.fixture
def observer():
    return FakeObserver()


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def agent(config, store, observer, executor, notifier):
    return BettingAgent(config, store, observer, executor, notifier)
