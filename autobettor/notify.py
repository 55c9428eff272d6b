"""
Notifications - tell the humans what the bot just did.

Fire-and-forget: a failed message is logged and forgotten, it never undoes
anything the engine already committed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from autobettor.config import TelegramConfig
from autobettor.errors import NotifyError

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    def send(self, text: str) -> None:
        """Deliver ``text``. Raises NotifyError."""


class NullNotifier(Notifier):
    def send(self, text: str) -> None:
        logger.debug("Notification (not sent): %s", text)


class TelegramNotifier(Notifier):
    API_URL = "https://api.telegram.org"

    def __init__(self, config: TelegramConfig, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, text: str) -> None:
        if not self.config.enabled:
            return
        try:
            response = self.session.post(
                f"{self.API_URL}/bot{self.config.bot_token}/sendMessage",
                json={
                    "chat_id": self.config.chat_id,
                    "text": text,
                    "parse_mode": "HTML",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotifyError(f"Telegram Error: {e}") from e


def build_notifier(config: TelegramConfig) -> Notifier:
    if config.enabled:
        return TelegramNotifier(config)
    return NullNotifier()
