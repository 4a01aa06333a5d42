"""
Models — Pydantic schemas for platforms, repositories and app config.
"""

from .config import AppConfig
from .platform import BUILTIN_PLATFORMS, Platform, UrlScheme
from .repository import (
    DEFAULT_BRANCHES,
    RepoRole,
    Repository,
    SyncStatus,
    make_repository_id,
)

__all__ = [
    "AppConfig",
    "BUILTIN_PLATFORMS",
    "DEFAULT_BRANCHES",
    "Platform",
    "RepoRole",
    "Repository",
    "SyncStatus",
    "UrlScheme",
    "make_repository_id",
]
