"""
Sync Errors — Failure taxonomy for reconciliation and fan-out.

Every SyncError is fatal for the job it occurs in. Whether the next
scheduled sync may succeed depends on the kind:

- AuthError: token missing or rejected. Needs a new token.
- TransportError / CloneError / GitTimeoutError: network or remote trouble.
  Retried naturally on the next sync.
- BranchResolutionError: nothing to track on the remote.
- DivergedHistoryError: local history diverged. Needs manual intervention;
  never force-resolved.
- UnsupportedPlatformError / PlatformNotFoundError: configuration defects.

AlreadyInFlightError and RepositoryNotFoundError are not job failures and
do not subclass SyncError.
"""

from __future__ import annotations

from typing import Optional

from .credentials import redact


class SyncError(Exception):
    """Base class for errors that fail a sync job."""

    kind = "sync_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = redact(message)
        self.detail = redact(detail) if detail else None
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class AuthError(SyncError):
    kind = "auth"


class TransportError(SyncError):
    kind = "transport"


class CloneError(TransportError):
    kind = "clone"


class GitTimeoutError(TransportError):
    kind = "timeout"


class RepositoryStateError(SyncError):
    """A local git operation failed (bad ref, locked index, ...)."""

    kind = "repository_state"


class BranchResolutionError(SyncError):
    kind = "branch_resolution"


class DivergedHistoryError(SyncError):
    kind = "diverged"


class UnsupportedPlatformError(SyncError):
    kind = "unsupported_platform"


class PlatformNotFoundError(SyncError):
    kind = "platform_not_found"


class AlreadyInFlightError(Exception):
    """A sync job for this repository is already running. Not a failure."""

    def __init__(self, repository_id: str):
        self.repository_id = repository_id
        super().__init__(f"Sync already in flight for {repository_id}")


class RepositoryNotFoundError(Exception):
    def __init__(self, repository_id: str):
        self.repository_id = repository_id
        super().__init__(f"Repository not found: {repository_id}")
