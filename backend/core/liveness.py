from __future__ import annotations

import logging
import threading

from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections

logger = logging.getLogger(__name__)


def ping_database(alias: str = DEFAULT_DB_ALIAS) -> None:
    """Run a trivial query; raises DatabaseError when the database is unreachable."""
    with connections[alias].cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


class LivenessCheck:
    """Startup database check that retries a bounded number of times.

    Attempts run on daemon timer threads so the HTTP listener never waits
    for the database. After ``max_retries`` failed retries the check gives up.
    """

    def __init__(self, *, max_retries: int, retry_delay: float, alias: str = DEFAULT_DB_ALIAS):
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.alias = alias
        self.retries = 0
        self.connected = False

    def start(self) -> None:
        self._schedule(0.0)

    def _schedule(self, delay: float) -> None:
        timer = threading.Timer(delay, self._run_in_thread)
        timer.daemon = True
        timer.start()

    def _run_in_thread(self) -> None:
        try:
            self.run_attempt()
        finally:
            connections.close_all()

    def run_attempt(self) -> bool:
        try:
            ping_database(self.alias)
        except DatabaseError as exc:
            if self.retries >= self.max_retries:
                logger.error(
                    "Database liveness check failed after %d retries, giving up: %s",
                    self.retries,
                    exc,
                )
                return False
            self.retries += 1
            logger.warning(
                "Database liveness check failed (%s); retry %d/%d in %.1fs",
                exc,
                self.retries,
                self.max_retries,
                self.retry_delay,
            )
            self._schedule(self.retry_delay)
            return False

        self.connected = True
        logger.info("Connected to %s database", connections[self.alias].vendor)
        return True
