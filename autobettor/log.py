"""Logging setup. Everything goes through a rich handler on stderr."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Route the ``autobettor`` loggers through rich.

    DEBUG shows every step of a cycle; otherwise only outcomes, vetoes
    and failures are reported.
    """
    level = logging.DEBUG if debug else logging.INFO
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("autobettor")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
