"""
Repository Reconciler — Bring one working copy in line with its remote.

First sync clones. Later syncs verify the origin URL (tokens rotate),
fetch, pick the branch to track and fast-forward it. Local history is
never overwritten: a divergence is reported as DivergedHistoryError.

Working copies live under WORK_DIR/<platformId>_<owner>_<name>. They are
disposable: a directory there that is not a git repository is cleared
before cloning.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..models.platform import Platform
from ..models.repository import Repository
from .branches import resolve_branch
from .credentials import build_url
from .errors import AuthError, BranchResolutionError
from .git_ops import GitOperations

logger = logging.getLogger(__name__)

ORIGIN = "origin"


def working_copy_path(work_dir: Path, repository: Repository) -> Path:
    """Local clone location, keyed by platform and path."""
    return Path(work_dir) / f"{repository.platform_id}_{repository.path.replace('/', '_')}"


@dataclass
class ReconcileResult:
    """Outcome of a successful reconcile."""

    branch_used: str
    cloned: bool = False
    origin_rewired: bool = False
    head: Optional[str] = None


class RepositoryReconciler:
    """Drives a local working copy to match its remote."""

    def __init__(self, git: GitOperations, work_dir: Path):
        self.git = git
        self.work_dir = Path(work_dir)

    def working_copy(self, repository: Repository) -> Path:
        return working_copy_path(self.work_dir, repository)

    def reconcile(self, repository: Repository, platform: Platform) -> ReconcileResult:
        """
        Clone or update the working copy of `repository`.

        Raises:
            AuthError: the platform has no token, or the remote rejected it
            CloneError / TransportError: network or remote failure
            BranchResolutionError: the remote has no branch to track
            DivergedHistoryError: the local branch cannot be fast-forwarded
        """
        if not platform.has_token:
            raise AuthError(f"Platform {platform.id} has no token configured")

        path = self.working_copy(repository)
        url = build_url(platform, repository.path)
        result = ReconcileResult(branch_used="")

        path.mkdir(parents=True, exist_ok=True)

        if not self.git.is_repo(path):
            self._clear_stale(path, repository)
            logger.info(
                f"[reconcile] Cloning {platform.id}/{repository.path}",
                extra={"repo_id": repository.id, "platform_id": platform.id},
            )
            self.git.clone(url, path)
            result.cloned = True
        else:
            result.origin_rewired = self._ensure_origin(path, url, repository)

        logger.debug(f"[reconcile] Fetching origin for {repository.id}")
        self.git.fetch(path, ORIGIN)

        branch = self._resolve(path, repository)
        self._checkout(path, branch)
        self.git.pull(path, ORIGIN, branch)

        result.branch_used = branch
        result.head = self.git.head_commit(path)
        logger.info(
            f"[reconcile] {repository.id}: on {branch} at {(result.head or '?')[:12]}",
            extra={"repo_id": repository.id, "platform_id": platform.id},
        )
        return result

    def _clear_stale(self, path: Path, repository: Repository) -> None:
        """Empty a directory left behind by a broken or interrupted clone."""
        if not any(path.iterdir()):
            return
        logger.warning(
            f"[reconcile] {repository.id}: {path} is not a git repository, discarding it",
            extra={"repo_id": repository.id},
        )
        shutil.rmtree(path)
        path.mkdir(parents=True)

    def _ensure_origin(self, path: Path, url: str, repository: Repository) -> bool:
        """Make origin point at `url`. Returns True if it had to be rewired."""
        current = self.git.get_remote_url(path, ORIGIN)
        if current == url:
            return False

        if current is None:
            logger.info(f"[reconcile] {repository.id}: adding missing origin remote")
        else:
            # Token rotated or platform moved
            logger.info(f"[reconcile] {repository.id}: origin URL changed, rewiring")
            self.git.remove_remote(path, ORIGIN)
        self.git.add_remote(path, ORIGIN, url)
        return True

    def _resolve(self, path: Path, repository: Repository) -> str:
        remote_branches = self.git.list_remote_branches(path, ORIGIN)
        if not remote_branches:
            raise BranchResolutionError(f"Remote of {repository.id} has no branches")

        branch = resolve_branch(repository.branches, remote_branches)
        if branch:
            return branch

        default = self.git.remote_default_branch(path, ORIGIN)
        if default and default in remote_branches:
            logger.info(
                f"[reconcile] {repository.id}: none of {repository.branches} on remote, "
                f"using default branch {default}"
            )
            return default

        raise BranchResolutionError(
            f"No branch to track for {repository.id}",
            f"candidates={repository.branches}, remote={sorted(remote_branches)}",
        )

    def _checkout(self, path: Path, branch: str) -> None:
        if branch in self.git.list_local_branches(path):
            if self.git.current_branch(path) != branch:
                self.git.checkout(path, branch)
        else:
            self.git.checkout(path, branch, create_from=f"{ORIGIN}/{branch}")
