"""
Services — Wire stores, git and the sync engine together.

One Services object is built per process (CLI invocation or admin
server) and shared by everything in it.

## Usage

    from gitmirror.services import Services

    services = Services.from_settings(Settings.from_env())
    services.bootstrap()
    services.coordinator.sync_all()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config.settings import Settings
from .config.validator import validate_registry
from .models.repository import Repository
from .persistence.config_store import ConfigStore
from .persistence.json_store import StoreError
from .persistence.migration import MigrationResult, migrate_legacy_config
from .persistence.platforms import PlatformStore
from .persistence.repositories import RepositoryStore
from .sync.coordinator import SyncCoordinator
from .sync.fanout import MirrorFanout
from .sync.git_ops import GitOperations
from .sync.reconciler import RepositoryReconciler
from .sync.scheduler import AutoSyncScheduler

logger = logging.getLogger(__name__)


class Services:
    """Container for the long-lived objects of one process."""

    def __init__(
        self,
        settings: Settings,
        git: Optional[GitOperations] = None,
    ):
        self.settings = settings
        self.platforms = PlatformStore(settings.data_dir)
        self.repositories = RepositoryStore(settings.data_dir)
        self.config = ConfigStore(settings.data_dir)
        self.git = git or GitOperations(
            network_timeout=settings.git_timeout,
            local_timeout=settings.git_local_timeout,
        )
        self.reconciler = RepositoryReconciler(self.git, settings.work_dir)
        self.fanout = MirrorFanout(
            self.git, self.platforms, self.repositories, settings.work_dir
        )
        self.coordinator = SyncCoordinator(
            self.repositories,
            self.platforms,
            self.reconciler,
            self.fanout,
            max_workers=settings.sync_workers,
        )
        self.scheduler = AutoSyncScheduler(self.coordinator, self.config)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        return cls(settings)

    def bootstrap(self, migrate: bool = True) -> Optional[MigrationResult]:
        """Create data dirs, seed built-in platforms, migrate legacy config."""
        self.settings.ensure_dirs()
        self.platforms.seed_builtin()
        self.config.get()
        if not migrate:
            return None
        try:
            return migrate_legacy_config(
                self.repositories, self.config, self.settings.legacy_config_path
            )
        except Exception as e:
            logger.error(f"Legacy config migration failed: {e}")
            return None

    def register_repository(self, data: Dict[str, Any]) -> Repository:
        """Add a repository after checking its platform exists."""
        platform_id = data.get("platformId") or data.get("platform_id")
        if not platform_id or self.platforms.get_by_id(platform_id) is None:
            raise StoreError(f"Unknown platform: {platform_id}")
        return self.repositories.add(data)

    def issues(self):
        return validate_registry(self.platforms.list(), self.repositories.list())

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.coordinator.shutdown(wait_for_jobs=True)
