"""
Registry Validator — Check platforms and repositories before syncing.

Finds configuration defects that would make a sync fail (or silently do
nothing) so they can be fixed before a job is scheduled.

## Usage

    from gitmirror.config.validator import validate_registry

    for issue in validate_registry(platforms.list(), repositories.list()):
        print(issue.level, issue.repository_id, issue.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.platform import Platform
from ..models.repository import RepoRole, Repository

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"
LEVEL_INFO = "info"


@dataclass
class RegistryIssue:
    level: str
    message: str
    repository_id: Optional[str] = None
    platform_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "level": self.level,
            "message": self.message,
            "repository_id": self.repository_id,
            "platform_id": self.platform_id,
        }


def validate_registry(
    platforms: List[Platform], repositories: List[Repository]
) -> List[RegistryIssue]:
    """Return every issue found; an empty list means ready to sync."""
    issues: List[RegistryIssue] = []
    by_id = {p.id: p for p in platforms}

    sources = [r for r in repositories if r.role == RepoRole.SOURCE]
    mirrors = [r for r in repositories if r.role == RepoRole.MIRROR]

    for repo in repositories:
        platform = by_id.get(repo.platform_id)
        if platform is None:
            issues.append(RegistryIssue(
                LEVEL_ERROR,
                f"references unknown platform '{repo.platform_id}'",
                repository_id=repo.id,
                platform_id=repo.platform_id,
            ))
            continue

        if not platform.has_token:
            if repo.role == RepoRole.SOURCE:
                issues.append(RegistryIssue(
                    LEVEL_ERROR,
                    f"platform '{platform.id}' has no token; source cannot be fetched",
                    repository_id=repo.id,
                    platform_id=platform.id,
                ))
            else:
                issues.append(RegistryIssue(
                    LEVEL_WARNING,
                    f"platform '{platform.id}' has no token; mirror will be skipped",
                    repository_id=repo.id,
                    platform_id=platform.id,
                ))

    for source in sources:
        if not any(m.path == source.path and m.platform_id != source.platform_id for m in mirrors):
            issues.append(RegistryIssue(
                LEVEL_INFO, "source has no mirrors", repository_id=source.id
            ))

    for mirror in mirrors:
        if not any(s.path == mirror.path and s.platform_id != mirror.platform_id for s in sources):
            issues.append(RegistryIssue(
                LEVEL_WARNING,
                "mirror has no source with the same path; it will never receive pushes",
                repository_id=mirror.id,
            ))

    return issues
