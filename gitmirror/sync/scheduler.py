"""
Auto-Sync Scheduler — Periodically sync every repository.

Reads auto_sync / sync_interval from the config store on every cycle,
so changes made in the admin API take effect without a restart.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..persistence.config_store import ConfigStore
from .coordinator import SyncCoordinator

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 60
DISABLED_POLL_SECONDS = 60


class AutoSyncScheduler:
    """Background thread calling coordinator.sync_all() on an interval."""

    def __init__(self, coordinator: SyncCoordinator, config_store: ConfigStore):
        self.coordinator = coordinator
        self.config_store = config_store
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="gitmirror-auto-sync", daemon=True
        )
        self._thread.start()
        logger.info("[scheduler] Auto-sync scheduler started")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("[scheduler] Auto-sync scheduler stopped")

    def run_once(self) -> int:
        """One cycle. Returns the number of jobs scheduled (0 if disabled)."""
        config = self.config_store.get()
        if not config.auto_sync:
            logger.debug("[scheduler] auto_sync disabled, skipping cycle")
            return 0
        return self.coordinator.sync_all()

    def next_delay(self) -> int:
        config = self.config_store.get()
        if not config.auto_sync:
            return DISABLED_POLL_SECONDS
        return max(MIN_INTERVAL_SECONDS, config.sync_interval)

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("[scheduler] Auto-sync cycle failed")

            try:
                delay = self.next_delay()
            except Exception:
                delay = DISABLED_POLL_SECONDS
            self._stop.wait(delay)
