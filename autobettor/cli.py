"""
CLI Entry Point for AutoBettor.

Commands:
  run     - Start the scheduler and the operator server
  scan    - Run a single cycle now
  status  - Show the persisted daily counters and recent bets
  config  - Show the current configuration
  settle  - Record the outcome of a pending bet
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from autobettor import __version__
from autobettor.agent import BettingAgent
from autobettor.config import BotConfig
from autobettor.log import setup_logging
from autobettor.markets.observer import GatewayObserver
from autobettor.notify import build_notifier
from autobettor.scheduler import CycleScheduler
from autobettor.server import start_server_thread
from autobettor.trading.executor import GatewayExecutor
from autobettor.trading.state import BetOutcome, StateStore, settle_bet

console = Console()


def build_agent(config: BotConfig) -> BettingAgent:
    observer = GatewayObserver(config.site)
    return BettingAgent(
        config=config,
        store=StateStore(config.state_path),
        observer=observer,
        executor=GatewayExecutor(config.site, observer),
        notifier=build_notifier(config.telegram),
    )


@click.group()
@click.version_option(version=__version__, prog_name="AutoBettor")
def cli():
    """AutoBettor - rule-based virtual football betting with hard risk limits."""
    pass


@cli.command()
@click.option("--interval", type=int, default=None,
              help="Minutes between scans (overrides SCAN_INTERVAL_MIN)")
@click.option("--port", type=int, default=None, help="Operator server port (overrides PORT)")
def run(interval, port):
    """Scan now, then every interval, until interrupted."""
    config = BotConfig()
    setup_logging(config.debug)
    if interval is not None:
        config.schedule.scan_interval_min = interval
    if port is not None:
        config.server.port = port

    mode_text = "[bold yellow]DRY RUN[/bold yellow]" if config.dry_run else "[bold red]LIVE[/bold red]"
    console.print(Panel(
        f"Mode: {mode_text}\n"
        f"Scan every: [cyan]{config.schedule.interval_minutes} min[/cyan]\n"
        f"Max stake: [yellow]{config.risk.max_stake:.2f}[/yellow] | "
        f"Max daily loss: [yellow]{config.risk.max_daily_loss:.2f}[/yellow] | "
        f"Max bets/day: [yellow]{config.risk.max_bets_per_day}[/yellow]\n"
        f"State: {config.state_path}\n"
        f"Server: http://{config.server.host}:{config.server.port}",
        title=f"[bold]AutoBettor v{__version__}[/bold]",
    ))

    agent = build_agent(config)
    # separate store so /state reads never reset the agent's last_error
    start_server_thread(StateStore(config.state_path), config.server.host, config.server.port)
    CycleScheduler(agent, config.schedule.interval_minutes).start()


@cli.command()
def scan():
    """Run a single cycle and show what happened."""
    config = BotConfig()
    setup_logging(config.debug)
    report = build_agent(config).run_cycle()

    table = Table(title="Cycle Report", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Outcome", report.outcome.value)
    table.add_row("Matches", str(report.matches_seen))
    table.add_row("Candidates", str(report.candidates))
    if report.candidate:
        table.add_row("Selected", report.candidate.summary)
    if report.decision:
        table.add_row("Stake", f"{report.decision.stake:.2f}")
    if report.message:
        table.add_row("Message", report.message)
    console.print(table)


@cli.command()
@click.option("--bets", "bet_count", default=10, help="How many recent bets to list")
def status(bet_count):
    """Show today's counters and the latest bets."""
    config = BotConfig()
    state = StateStore(config.state_path).load()
    daily = state.daily

    console.print(Panel(
        f"Date: {daily.date}\n"
        f"Bets placed: {daily.bets_placed} / {config.risk.max_bets_per_day}\n"
        f"Loss: {daily.cumulative_loss:.2f} / {config.risk.max_daily_loss:.2f}\n"
        f"Consecutive losses: {daily.consecutive_losses}\n"
        f"History: {len(state.history_matches)} matches | Journal: {len(state.bets)} bets",
        title="[bold]Daily Status[/bold]",
    ))

    if not state.bets:
        return

    table = Table(title="Recent Bets", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Match")
    table.add_column("Pick")
    table.add_column("Odds")
    table.add_column("Stake")
    table.add_column("Outcome")
    offset = max(len(state.bets) - bet_count, 0)
    for i, bet in enumerate(state.bets[offset:], start=offset):
        table.add_row(str(i), bet.timestamp[:19], bet.match_id[:40], bet.selection.value,
                      f"{bet.odds:g}", f"{bet.stake:.2f}", bet.outcome.value)
    console.print(table)


@cli.command()
def config():
    """Show the effective configuration."""
    cfg = BotConfig()

    console.print(Panel(
        f"Scan interval: {cfg.schedule.interval_minutes} min\n"
        f"Max daily loss: {cfg.risk.max_daily_loss:.2f}\n"
        f"Max stake: {cfg.risk.max_stake:.2f}\n"
        f"Min balance: {cfg.risk.min_balance:.2f}\n"
        f"Max bets/day: {cfg.risk.max_bets_per_day}\n"
        f"Dry run: {cfg.dry_run}\n"
        f"Debug: {cfg.debug}\n"
        f"State path: {cfg.state_path}\n"
        f"Site API: {cfg.site.api_url} (timeout {cfg.site.request_timeout:.0f}s)\n"
        f"Credentials: {'Configured' if cfg.site.has_credentials else 'Not set'}\n"
        f"Telegram: {'Configured' if cfg.telegram.enabled else 'Not set'}",
        title="[bold]AutoBettor Configuration[/bold]",
    ))


@cli.command()
@click.argument("index", type=int)
@click.argument("outcome", type=click.Choice(["won", "lost", "void"]))
def settle(index, outcome):
    """Mark bet INDEX (see `status`) as won, lost or void."""
    config = BotConfig()
    store = StateStore(config.state_path)
    state = store.load()
    try:
        bet = settle_bet(state, index, BetOutcome(outcome))
    except ValueError as e:
        raise click.ClickException(str(e))
    if not store.save(state):
        raise click.ClickException(f"Could not write {config.state_path}")
    console.print(f"[green]Bet {index} on {bet.match_id} settled as {outcome}.[/green]")
    console.print(f"Daily loss now {state.daily.cumulative_loss:.2f}, "
                  f"losing streak {state.daily.consecutive_losses}.")


def main():
    cli()


if __name__ == "__main__":
    main()
