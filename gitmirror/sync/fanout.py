"""
Mirror Fan-out — Push a source's branches to every sibling mirror.

Mirrors are repositories with role=mirror, the same path as the source
and a different platform. Each mirror gets its own remote on the
source's working copy (mirror-<platformId>), replaced on every run
since tokens rotate.

Failures are contained per mirror and per branch: fanout() never raises.
The outcome of each mirror is written to that mirror's own status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..models.repository import RepoRole, Repository, SyncStatus
from ..persistence.json_store import utc_now_iso
from ..persistence.platforms import PlatformStore
from ..persistence.repositories import RepositoryStore
from .credentials import build_url
from .errors import PlatformNotFoundError, SyncError
from .git_ops import GitOperations
from .reconciler import working_copy_path

logger = logging.getLogger(__name__)

OUTCOME_SUCCESS = "success"
OUTCOME_FAILED = "failed"
OUTCOME_SKIPPED = "skipped"


def mirror_remote_name(platform_id: str) -> str:
    return f"mirror-{platform_id}"


def _fields(source: Repository, mirror: Repository) -> Dict[str, str]:
    """Structured log fields for one mirror push."""
    return {"repo_id": source.id, "mirror_id": mirror.id, "platform_id": mirror.platform_id}


@dataclass
class MirrorOutcome:
    """Result of pushing to one mirror."""

    repository_id: str
    platform_id: str
    status: str
    pushed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OUTCOME_SUCCESS

    def to_dict(self) -> Dict:
        return {
            "repository_id": self.repository_id,
            "platform_id": self.platform_id,
            "status": self.status,
            "pushed": self.pushed,
            "failed": self.failed,
            "error": self.error,
        }


class MirrorFanout:
    """Pushes a reconciled source working copy out to its mirrors."""

    def __init__(
        self,
        git: GitOperations,
        platforms: PlatformStore,
        repositories: RepositoryStore,
        work_dir: Path,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.git = git
        self.platforms = platforms
        self.repositories = repositories
        self.work_dir = Path(work_dir)
        self.clock = clock

    def find_mirrors(self, source: Repository) -> List[Repository]:
        return [
            r for r in self.repositories.list()
            if r.role == RepoRole.MIRROR
            and r.path == source.path
            and r.platform_id != source.platform_id
        ]

    def fanout(self, source: Repository, branch_used: str) -> List[MirrorOutcome]:
        """Push to all mirrors of `source`. Never raises."""
        try:
            mirrors = self.find_mirrors(source)
        except Exception as e:
            logger.error(f"[fanout] Could not list mirrors of {source.id}: {e}")
            return []

        if not mirrors:
            logger.debug(f"[fanout] {source.id}: no mirrors configured")
            return []

        workdir = working_copy_path(self.work_dir, source)
        branches = self._branches_to_push(source, branch_used)
        logger.info(
            f"[fanout] {source.id}: pushing {branches} to {len(mirrors)} mirror(s)",
            extra={"repo_id": source.id},
        )

        outcomes = []
        for mirror in mirrors:
            try:
                outcome = self._push_mirror(workdir, mirror, branches)
            except SyncError as e:
                logger.error(f"[fanout] {mirror.id}: {e}", extra=_fields(source, mirror))
                outcome = MirrorOutcome(mirror.id, mirror.platform_id, OUTCOME_FAILED,
                                        error=str(e))
            except Exception as e:
                logger.exception(
                    f"[fanout] {mirror.id}: unexpected error", extra=_fields(source, mirror)
                )
                outcome = MirrorOutcome(mirror.id, mirror.platform_id, OUTCOME_FAILED,
                                        error=f"{type(e).__name__}: {e}")

            self._record(outcome)
            outcomes.append(outcome)

        ok_count = sum(1 for o in outcomes if o.ok)
        skipped = sum(1 for o in outcomes if o.status == OUTCOME_SKIPPED)
        logger.info(
            f"[fanout] {source.id}: {ok_count}/{len(outcomes)} mirrors synced"
            + (f", {skipped} skipped" if skipped else ""),
            extra={"repo_id": source.id},
        )
        return outcomes

    def _branches_to_push(self, source: Repository, branch_used: str) -> List[str]:
        branches = list(source.branches)
        # The tracked branch may be the remote default, outside the candidates
        if branch_used and branch_used not in branches:
            branches.append(branch_used)
        return branches

    def _push_mirror(self, workdir: Path, mirror: Repository, branches: List[str]) -> MirrorOutcome:
        platform = self.platforms.get_by_id(mirror.platform_id)
        if platform is None:
            raise PlatformNotFoundError(f"Platform {mirror.platform_id} not found")

        if not platform.has_token:
            logger.warning(
                f"[fanout] {mirror.id}: platform {platform.id} has no token, skipping",
                extra={"mirror_id": mirror.id, "platform_id": platform.id},
            )
            return MirrorOutcome(mirror.id, mirror.platform_id, OUTCOME_SKIPPED,
                                 error="platform has no token")

        remote = mirror_remote_name(platform.id)
        url = build_url(platform, mirror.path)

        if remote in self.git.list_remotes(workdir):
            self.git.remove_remote(workdir, remote)
        self.git.add_remote(workdir, remote, url)

        local = set(self.git.list_local_branches(workdir))
        outcome = MirrorOutcome(mirror.id, mirror.platform_id, OUTCOME_SUCCESS)
        fields = {"mirror_id": mirror.id, "platform_id": platform.id}

        for branch in branches:
            if branch not in local:
                continue
            try:
                self.git.push(workdir, remote, branch)
                outcome.pushed.append(branch)
                logger.info(f"[fanout] {mirror.id}: pushed {branch}", extra=fields)
            except SyncError as e:
                outcome.failed[branch] = str(e)
                logger.warning(f"[fanout] {mirror.id}: push of {branch} failed: {e}", extra=fields)

        if outcome.failed:
            outcome.status = OUTCOME_FAILED
            outcome.error = f"{len(outcome.failed)} branch push(es) failed"
        elif not outcome.pushed:
            outcome.status = OUTCOME_FAILED
            outcome.error = "no configured branch exists locally"
        return outcome

    def _record(self, outcome: MirrorOutcome) -> None:
        """Write the mirror's own status. Skipped mirrors are left untouched."""
        if outcome.status == OUTCOME_SKIPPED:
            return
        status = SyncStatus.SUCCESS if outcome.ok else SyncStatus.FAILED
        try:
            self.repositories.update_status(outcome.repository_id, status, self.clock())
        except Exception as e:
            logger.error(f"[fanout] Could not record status of {outcome.repository_id}: {e}")
