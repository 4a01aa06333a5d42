"""
Branch Resolver — Pick the branch to track from a candidate list.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence


def resolve_branch(candidates: Sequence[str], remote_branches: Iterable[str]) -> Optional[str]:
    """
    Return the first candidate that exists on the remote, or None.

    None means "use the remote's default branch": a repository whose
    default branch is neither main nor master must still sync.
    """
    available = set(remote_branches)
    for name in candidates:
        if name in available:
            return name
    return None
