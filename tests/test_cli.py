import json

from click.testing import CliRunner

from autobettor.cli import cli
from autobettor.markets.models import Selection
from autobettor.trading.state import BetRecord, DailyCounters, State, StateStore, today_utc


def _seed(path):
    store = StateStore(path)
    bet = BetRecord(f"{today_utc()}T08:00:00+00:00", "A vs B", Selection.HOME, 3.5, 2.0)
    store.save(State(bets=[bet], daily=DailyCounters(bets_placed=1)))
    return store


def test_status(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    _seed(path)
    monkeypatch.setenv("STATE_PATH", str(path))

    result = CliRunner().invoke(cli, ["status"])

    assert result.exit_code == 0, result.output
    assert "Bets placed: 1" in result.output
    assert "A vs B" in result.output


def test_settle_lost(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    _seed(path)
    monkeypatch.setenv("STATE_PATH", str(path))

    result = CliRunner().invoke(cli, ["settle", "0", "lost"])

    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text())
    assert data["bets"][0]["outcome"] == "lost"
    assert data["daily"]["loss"] == 2.0


def test_settle_twice_fails(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    _seed(path)
    monkeypatch.setenv("STATE_PATH", str(path))
    runner = CliRunner()

    runner.invoke(cli, ["settle", "0", "won"])
    result = runner.invoke(cli, ["settle", "0", "lost"])

    assert result.exit_code != 0
    assert "already settled" in result.output


def test_config(monkeypatch):
    monkeypatch.setenv("MAX_STAKE", "4")
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 0
    assert "Max stake: 4.00" in result.output


def test_run_gives_the_server_its_own_store(tmp_path, monkeypatch):
    monkeypatch.setenv("STATE_PATH", str(tmp_path / "state.json"))
    served = []
    scheduled = []

    class RecordingScheduler:
        def __init__(self, agent, interval_minutes):
            scheduled.append(agent)

        def start(self):
            pass

    monkeypatch.setattr("autobettor.cli.start_server_thread",
                        lambda store, host, port: served.append(store))
    monkeypatch.setattr("autobettor.cli.CycleScheduler", RecordingScheduler)

    result = CliRunner().invoke(cli, ["run", "--port", "0"])

    assert result.exit_code == 0, result.output
    assert len(served) == 1 and len(scheduled) == 1
    assert served[0] is not scheduled[0].store
    assert served[0].path == scheduled[0].store.path
