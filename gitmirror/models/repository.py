"""
Repository Models — Source and mirror repositories with sync status.

A repository's identity is derived from (role, platformId, path), so the
same logical repository always maps to the same id and working copy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BRANCHES = ["main", "master"]


class RepoRole(str, Enum):
    """Whether a repository is authoritative or a push target."""

    SOURCE = "source"
    MIRROR = "mirror"


class SyncStatus(str, Enum):
    """Sync state machine: idle → syncing → success | failed → syncing ..."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    FAILED = "failed"


def make_repository_id(role: str, platform_id: str, path: str) -> str:
    """Derive the stable repository id, e.g. source-github-org-repo."""
    role_value = role.value if isinstance(role, RepoRole) else str(role)
    return f"{role_value}-{platform_id}-{path.replace('/', '-')}"


class Repository(BaseModel):
    """A registered repository on one platform."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: RepoRole
    platform_id: str = Field(alias="platformId")
    path: str
    branches: List[str] = Field(default_factory=lambda: list(DEFAULT_BRANCHES))
    status: SyncStatus = SyncStatus.IDLE
    status_updated_at: Optional[str] = Field(default=None, alias="statusUpdatedAt")
    # Set only when a job finishes (success or failed), never on `syncing`
    last_synced_at: Optional[str] = Field(default=None, alias="lastSyncedAt")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        value = value.strip().strip("/")
        if value.endswith(".git"):
            value = value[: -len(".git")]
        if "/" not in value:
            raise ValueError("path must look like owner/name")
        return value

    @field_validator("branches")
    @classmethod
    def _check_branches(cls, value: List[str]) -> List[str]:
        cleaned = []
        for name in value:
            name = name.strip()
            if name and name not in cleaned:
                cleaned.append(name)
        return cleaned or list(DEFAULT_BRANCHES)

    @property
    def is_source(self) -> bool:
        return self.role == RepoRole.SOURCE

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the on-disk / API layout."""
        return self.model_dump(by_alias=True, mode="json")
