"""
Scheduler - fires a cycle once at startup, then every SCAN_INTERVAL_MIN.

Cycles never overlap. A tick that shows up while a cycle is still running
is dropped, not queued, so a slow site can't build up a backlog.
"""

import logging
import signal
import threading
import time
from typing import Optional

import schedule

from autobettor.agent import BettingAgent, CycleReport

logger = logging.getLogger(__name__)


class CycleScheduler:
    def __init__(self, agent: BettingAgent, interval_minutes: int = 10,
                 poll_seconds: float = 1.0):
        self.agent = agent
        self.interval_minutes = max(1, int(interval_minutes))
        self.poll_seconds = poll_seconds
        self.running = False
        self.dropped_ticks = 0
        self._in_flight = threading.Lock()
        self._scheduler = schedule.Scheduler()
        self._scheduler.every(self.interval_minutes).minutes.do(self.tick)

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def tick(self) -> Optional[CycleReport]:
        """Run one cycle unless one is already in flight."""
        if not self._in_flight.acquire(blocking=False):
            self.dropped_ticks += 1
            logger.warning("Previous cycle still running, dropping tick.")
            return None
        try:
            return self.agent.run_cycle()
        except Exception:
            logger.exception("Cycle crashed")
            return None
        finally:
            self._in_flight.release()

    def start(self, install_signal_handlers: bool = True):
        """Block, running cycles until ``stop`` or SIGINT/SIGTERM."""
        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._shutdown_handler)
            signal.signal(signal.SIGTERM, self._shutdown_handler)

        self.running = True
        logger.info("Scheduler started: every %d min.", self.interval_minutes)
        self.tick()

        while self.running:
            self._scheduler.run_pending()
            time.sleep(self.poll_seconds)

        self._scheduler.clear()
        logger.info("Scheduler stopped.")

    def stop(self):
        self.running = False

    def _shutdown_handler(self, signum, frame):
        logger.info("Shutdown signal received, stopping after the current cycle.")
        self.stop()
