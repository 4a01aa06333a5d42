"""
Sync Coordinator — Public entry point for repository syncs.

Accepts single and bulk sync requests, guarantees at most one job per
repository id at a time, records status transitions, and runs the
reconcile + fan-out work on a worker pool so callers never block.

## Usage

    coordinator = SyncCoordinator(repositories, platforms, reconciler, fanout)
    ack = coordinator.sync_one("source-github-org-repo")
    if not ack.accepted:
        print("already syncing")

    coordinator.status("source-github-org-repo")
    # {"id": ..., "status": "syncing", "lastSyncedAt": ...}
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from ..models.repository import Repository, SyncStatus
from ..persistence.json_store import utc_now_iso
from ..persistence.platforms import PlatformStore
from ..persistence.repositories import RepositoryStore
from .errors import AlreadyInFlightError, PlatformNotFoundError, RepositoryNotFoundError, SyncError
from .fanout import MirrorFanout
from .reconciler import RepositoryReconciler

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


@dataclass
class SyncAck:
    """What the caller of sync_one() gets back immediately."""

    repository_id: str
    accepted: bool
    status: str

    def to_dict(self) -> Dict:
        return {"id": self.repository_id, "accepted": self.accepted, "status": self.status}


class SyncCoordinator:
    """
    Schedules sync jobs.

    The in-flight set is owned here and only touched under self._lock.
    Every job releases its id on every exit path, so no failure can
    leave a repository permanently unsyncable.
    """

    def __init__(
        self,
        repositories: RepositoryStore,
        platforms: PlatformStore,
        reconciler: RepositoryReconciler,
        fanout: MirrorFanout,
        max_workers: int = DEFAULT_WORKERS,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.repositories = repositories
        self.platforms = platforms
        self.reconciler = reconciler
        self.fanout = fanout
        self.clock = clock

        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="gitmirror-sync"
        )
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()
        self._futures: Dict[str, Future] = {}

    # ─── In-flight guard ────────────────────────────────────

    def _claim(self, repository_id: str) -> None:
        with self._lock:
            if repository_id in self._in_flight:
                raise AlreadyInFlightError(repository_id)
            self._in_flight.add(repository_id)

    def _release(self, repository_id: str) -> None:
        with self._lock:
            self._in_flight.discard(repository_id)
            self._futures.pop(repository_id, None)

    def in_flight(self) -> List[str]:
        with self._lock:
            return sorted(self._in_flight)

    def is_in_flight(self, repository_id: str) -> bool:
        with self._lock:
            return repository_id in self._in_flight

    # ─── Public API ─────────────────────────────────────────

    def sync_one(self, repository_id: str) -> SyncAck:
        """
        Start a sync for one repository.

        Returns immediately once `syncing` is persisted. accepted=False
        means a job for this id is already running.

        Raises:
            RepositoryNotFoundError: unknown id
        """
        repository = self.repositories.get_by_id(repository_id)
        if repository is None:
            raise RepositoryNotFoundError(repository_id)

        try:
            self._start(repository)
        except AlreadyInFlightError:
            logger.info(
                f"[sync] {repository_id}: already in flight, ignoring request",
                extra={"repo_id": repository_id},
            )
            return SyncAck(repository_id, accepted=False, status=SyncStatus.SYNCING.value)

        return SyncAck(repository_id, accepted=True, status=SyncStatus.SYNCING.value)

    def sync_all(self) -> int:
        """
        Start a sync for every registered repository.

        Jobs are independent: one repository failing does not affect the
        others. Repositories already syncing are left alone. Returns the
        number of jobs scheduled.
        """
        snapshot = self.repositories.list()
        scheduled = 0
        for repository in snapshot:
            try:
                self._start(repository)
                scheduled += 1
            except AlreadyInFlightError:
                logger.debug(f"[sync] {repository.id}: already in flight, skipped")
            except Exception as e:
                logger.error(
                    f"[sync] {repository.id}: could not schedule: {e}",
                    extra={"repo_id": repository.id},
                )

        logger.info(f"[sync] Scheduled {scheduled}/{len(snapshot)} repositories")
        return scheduled

    def status(self, repository_id: str) -> Dict:
        repository = self.repositories.get_by_id(repository_id)
        if repository is None:
            raise RepositoryNotFoundError(repository_id)
        return {
            "id": repository.id,
            "status": repository.status.value,
            "lastSyncedAt": repository.last_synced_at,
        }

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until all currently running jobs finish. For CLI and tests."""
        with self._lock:
            futures = list(self._futures.values())
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_jobs: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_jobs)

    # ─── Job lifecycle ──────────────────────────────────────

    def _start(self, repository: Repository) -> None:
        """Claim the guard, persist `syncing`, submit the job."""
        self._claim(repository.id)
        try:
            self.repositories.update_status(repository.id, SyncStatus.SYNCING, self.clock())
            with self._lock:
                future = self._executor.submit(self._run_job, repository.id)
                self._futures[repository.id] = future
        except Exception:
            # Nothing is running for this id; don't leak the guard
            self._release(repository.id)
            raise

        logger.info(f"[sync] {repository.id}: scheduled", extra={"repo_id": repository.id})

    def _run_job(self, repository_id: str) -> SyncStatus:
        """Worker body. Always records a final status and releases the guard."""
        final = SyncStatus.FAILED
        try:
            final = self._execute(repository_id)
        except SyncError as e:
            logger.error(
                f"[sync] {repository_id}: failed ({e.kind}): {e}", extra={"repo_id": repository_id}
            )
        except Exception:
            logger.exception(
                f"[sync] {repository_id}: unexpected error", extra={"repo_id": repository_id}
            )
        finally:
            try:
                self.repositories.update_status(repository_id, final, self.clock())
            except Exception as e:
                logger.error(f"[sync] {repository_id}: could not record final status: {e}")
            finally:
                self._release(repository_id)

        logger.info(f"[sync] {repository_id}: {final.value}", extra={"repo_id": repository_id})
        return final

    def _execute(self, repository_id: str) -> SyncStatus:
        repository = self.repositories.get_by_id(repository_id)
        if repository is None:
            raise RepositoryNotFoundError(repository_id)

        platform = self.platforms.get_by_id(repository.platform_id)
        if platform is None:
            raise PlatformNotFoundError(
                f"Platform {repository.platform_id} of {repository_id} not found"
            )

        result = self.reconciler.reconcile(repository, platform)

        # Reconcile strictly precedes fan-out; fan-out never fails the source
        if repository.is_source:
            self.fanout.fanout(repository, result.branch_used)

        return SyncStatus.SUCCESS
