"""
Persistence — JSON-file stores for platforms, repositories and config.
"""

from .config_store import ConfigStore
from .platforms import PlatformStore
from .repositories import RepositoryStore

__all__ = ["ConfigStore", "PlatformStore", "RepositoryStore"]
