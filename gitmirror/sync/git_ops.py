"""
Git Operations — Thin, timeout-bounded wrapper around the git CLI.

Every call runs `git` in a subprocess with a timeout so a dead remote can
never hang a sync job. Failures are mapped onto the sync error taxonomy
from stderr, and URLs are redacted before they reach logs or exceptions.

## Usage

    from gitmirror.sync.git_ops import GitOperations

    git = GitOperations(network_timeout=300)
    if not git.is_repo(path):
        git.clone(url, path)
    git.fetch(path, "origin")
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .credentials import redact
from .errors import (
    AuthError,
    CloneError,
    DivergedHistoryError,
    GitTimeoutError,
    RepositoryStateError,
    SyncError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_TIMEOUT = 300
DEFAULT_LOCAL_TIMEOUT = 30

_AUTH_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "invalid username or password",
    "http basic: access denied",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
    "permission denied",
    "access denied",
    "bad credentials",
)

_DIVERGED_MARKERS = (
    "not possible to fast-forward",
    "diverging branches",
    "have diverged",
    "non-fast-forward",
    "fetch first",
    "[rejected]",
)

_TRANSPORT_MARKERS = (
    "could not resolve host",
    "unable to access",
    "connection timed out",
    "connection refused",
    "failed to connect",
    "early eof",
    "remote end hung up",
    "repository not found",
    "does not appear to be a git repository",
    "network is unreachable",
)


def _classify(stderr: str, default: type) -> type:
    text = stderr.lower()
    if any(m in text for m in _AUTH_MARKERS):
        return AuthError
    if any(m in text for m in _DIVERGED_MARKERS):
        return DivergedHistoryError
    if any(m in text for m in _TRANSPORT_MARKERS):
        return TransportError if default is RepositoryStateError else default
    return default


class GitOperations:
    """
    The git capability used by the reconciler and fan-out.

    Network operations (clone/fetch/pull/push) use `network_timeout`;
    purely local ones use `local_timeout`.
    """

    def __init__(
        self,
        network_timeout: int = DEFAULT_NETWORK_TIMEOUT,
        local_timeout: int = DEFAULT_LOCAL_TIMEOUT,
        git_binary: str = "git",
    ):
        self.network_timeout = network_timeout
        self.local_timeout = local_timeout
        self.git_binary = git_binary

    # ─── Plumbing ───────────────────────────────────────────

    def _env(self) -> Dict[str, str]:
        env = dict(os.environ)
        # Never block on an interactive credential prompt
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["GIT_ASKPASS"] = "echo"
        env.setdefault("LC_ALL", "C")
        return env

    def _run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        network: bool = False,
        error_cls: type = RepositoryStateError,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a git command. Raises a SyncError subclass on failure if check."""
        cmd = [self.git_binary] + list(args)
        printable = redact(" ".join(cmd))
        timeout = self.network_timeout if network else self.local_timeout

        logger.debug(f"[git] {printable} (cwd={cwd}, timeout={timeout}s)")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=self._env(),
            )
        except subprocess.TimeoutExpired:
            raise GitTimeoutError(f"git {args[0]} timed out after {timeout}s", printable)
        except OSError as e:
            raise RepositoryStateError(f"Could not run git {args[0]}", str(e))

        if check and result.returncode != 0:
            stderr = (result.stderr or result.stdout or "").strip()
            cls = _classify(stderr, error_cls)
            raise cls(f"git {args[0]} failed", stderr or f"exit code {result.returncode}")

        return result

    def _lines(self, result: subprocess.CompletedProcess) -> List[str]:
        return [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]

    # ─── Inspection ─────────────────────────────────────────

    def version(self) -> Optional[str]:
        """`git --version` output, or None if git cannot be run."""
        try:
            result = self._run(["--version"], check=False)
        except SyncError:
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def is_repo(self, path: Path) -> bool:
        """True if `path` is the top level of an initialised git working copy."""
        path = Path(path)
        if not (path / ".git").exists():
            return False
        result = self._run(["rev-parse", "--is-inside-work-tree"], cwd=path, check=False)
        return result.returncode == 0 and result.stdout.strip() == "true"

    def list_remotes(self, path: Path) -> List[str]:
        return self._lines(self._run(["remote"], cwd=path))

    def get_remote_url(self, path: Path, name: str) -> Optional[str]:
        result = self._run(["remote", "get-url", name], cwd=path, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def list_remote_branches(self, path: Path, remote: str = "origin") -> List[str]:
        """Branches known for `remote` after the last fetch (HEAD excluded)."""
        prefix = f"refs/remotes/{remote}/"
        result = self._run(
            ["for-each-ref", "--format=%(refname)", prefix.rstrip("/")], cwd=path
        )
        branches = []
        for ref in self._lines(result):
            if not ref.startswith(prefix):
                continue
            name = ref[len(prefix):]
            if name != "HEAD":
                branches.append(name)
        return branches

    def list_local_branches(self, path: Path) -> List[str]:
        result = self._run(
            ["for-each-ref", "--format=%(refname:short)", "refs/heads"], cwd=path
        )
        return self._lines(result)

    def current_branch(self, path: Path) -> Optional[str]:
        result = self._run(["branch", "--show-current"], cwd=path, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def head_commit(self, path: Path) -> Optional[str]:
        result = self._run(["rev-parse", "HEAD"], cwd=path, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def remote_default_branch(self, path: Path, remote: str = "origin") -> Optional[str]:
        """
        The remote's default branch (what its HEAD points to).

        Refreshes refs/remotes/<remote>/HEAD from the remote first; if that
        fails the locally recorded value (set at clone time) is used.
        """
        try:
            self._run(["remote", "set-head", remote, "--auto"], cwd=path, network=True)
        except AuthError:
            raise
        except SyncError as e:
            logger.debug(f"[git] set-head {remote} --auto failed: {e}")

        result = self._run(
            ["symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD"], cwd=path, check=False
        )
        if result.returncode != 0:
            return None
        ref = result.stdout.strip()
        if ref.startswith(f"{remote}/"):
            return ref[len(remote) + 1:]
        return ref or None

    # ─── Mutation ───────────────────────────────────────────

    def clone(self, url: str, path: Path) -> None:
        """Clone into `path` (which must be empty or absent)."""
        path = Path(path)
        self._run(["clone", "--no-progress", url, str(path)], network=True, error_cls=CloneError)

    def fetch(self, path: Path, remote: str = "origin") -> None:
        self._run(["fetch", "--prune", "--no-progress", remote], cwd=path, network=True,
                  error_cls=TransportError)

    def pull(self, path: Path, remote: str, branch: str) -> None:
        """Fast-forward only. A divergent history raises DivergedHistoryError."""
        self._run(
            ["pull", "--ff-only", "--no-rebase", "--no-progress", remote, branch],
            cwd=path,
            network=True,
            error_cls=TransportError,
        )

    def checkout(self, path: Path, branch: str, create_from: Optional[str] = None) -> None:
        """Check out `branch`, creating it to track `create_from` when given."""
        if create_from:
            args = ["checkout", "-b", branch, "--track", create_from]
        else:
            args = ["checkout", branch]
        self._run(args, cwd=path)

    def add_remote(self, path: Path, name: str, url: str) -> None:
        self._run(["remote", "add", name, url], cwd=path)

    def remove_remote(self, path: Path, name: str) -> None:
        self._run(["remote", "remove", name], cwd=path)

    def push(self, path: Path, remote: str, branch: str) -> None:
        """Push a local branch to the same name on `remote`. Never forces."""
        self._run(
            ["push", "--no-progress", remote, f"refs/heads/{branch}:refs/heads/{branch}"],
            cwd=path,
            network=True,
            error_cls=TransportError,
        )
