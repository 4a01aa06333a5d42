"""
Sync Engine — Reconcile working copies and fan changes out to mirrors.

    from gitmirror.sync import SyncCoordinator

Components, leaves first: credentials (URL building), branches (branch
resolution), git_ops (git CLI), reconciler, fanout, coordinator, scheduler.
"""

from .coordinator import SyncAck, SyncCoordinator
from .errors import (
    AlreadyInFlightError,
    AuthError,
    BranchResolutionError,
    CloneError,
    DivergedHistoryError,
    GitTimeoutError,
    PlatformNotFoundError,
    RepositoryNotFoundError,
    RepositoryStateError,
    SyncError,
    TransportError,
    UnsupportedPlatformError,
)
from .fanout import MirrorFanout, MirrorOutcome
from .git_ops import GitOperations
from .reconciler import ReconcileResult, RepositoryReconciler
from .scheduler import AutoSyncScheduler

__all__ = [
    "AlreadyInFlightError",
    "AuthError",
    "AutoSyncScheduler",
    "BranchResolutionError",
    "CloneError",
    "DivergedHistoryError",
    "GitOperations",
    "GitTimeoutError",
    "MirrorFanout",
    "MirrorOutcome",
    "PlatformNotFoundError",
    "ReconcileResult",
    "RepositoryNotFoundError",
    "RepositoryReconciler",
    "RepositoryStateError",
    "SyncAck",
    "SyncCoordinator",
    "SyncError",
    "TransportError",
    "UnsupportedPlatformError",
]
