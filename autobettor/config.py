"""
Configuration for AutoBettor.

Every knob comes from the environment (or a .env file). Defaults are read
when a config object is built, so a fresh ``BotConfig()`` always reflects
the current environment.
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()

MAX_SITE_TIMEOUT_S = 60.0


def _env_str(name: str, default: str = ""):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_float(name: str, default: str):
    return field(default_factory=lambda: float(os.getenv(name, default)))


def _env_int(name: str, default: str):
    return field(default_factory=lambda: int(os.getenv(name, default)))


def _env_bool(name: str, default: str = "false"):
    return field(
        default_factory=lambda: os.getenv(name, default).strip().lower() in ("true", "1", "yes")
    )


@dataclass
class RiskConfig:
    max_daily_loss: float = _env_float("MAX_DAILY_LOSS", "50")
    max_stake: float = _env_float("MAX_STAKE", "5")
    min_balance: float = _env_float("MIN_BALANCE", "2")
    max_bets_per_day: int = _env_int("MAX_BETS_PER_DAY", "30")


@dataclass
class StrategyConfig:
    value_min_odds: float = 3.0
    trend_min_wins: int = 3
    trend_min_odds: float = 1.5
    trend_max_odds: float = 2.5
    unit_stake: float = 1.0


@dataclass
class ScheduleConfig:
    scan_interval_min: int = _env_int("SCAN_INTERVAL_MIN", "10")

    @property
    def interval_minutes(self) -> int:
        """Never scan more often than once a minute."""
        return max(1, self.scan_interval_min)


@dataclass
class SiteConfig:
    api_url: str = _env_str("SITE_API_URL", "http://localhost:8000")
    phone: str = _env_str("SITE_PHONE")
    password: str = _env_str("SITE_PASSWORD")
    timeout_s: float = _env_float("SITE_TIMEOUT", "30")

    @property
    def request_timeout(self) -> float:
        return min(max(self.timeout_s, 1.0), MAX_SITE_TIMEOUT_S)

    @property
    def has_credentials(self) -> bool:
        return bool(self.phone and self.password)


@dataclass
class TelegramConfig:
    bot_token: str = _env_str("TELEGRAM_BOT_TOKEN")
    chat_id: str = _env_str("TELEGRAM_CHAT_ID")

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)


@dataclass
class ServerConfig:
    host: str = _env_str("HOST", "0.0.0.0")
    port: int = _env_int("PORT", "3000")


@dataclass
class BotConfig:
    risk: RiskConfig = field(default_factory=RiskConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    state_path: str = _env_str("STATE_PATH", "state.json")
    dry_run: bool = _env_bool("DRY_RUN")
    debug: bool = _env_bool("DEBUG")
    history_limit: int = 300
    bet_retention: int = 300
