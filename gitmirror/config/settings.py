"""
Settings — Process-level configuration from environment variables.

    DATA_DIR            Where platforms/repositories/config JSON live (./data)
    WORK_DIR            Where working copies are cloned (./repos)
    GIT_TIMEOUT         Seconds allowed per network git op (300)
    GIT_LOCAL_TIMEOUT   Seconds allowed per local git op (30)
    SYNC_WORKERS        Concurrent sync jobs (4)
    LEGACY_CONFIG_PATH  Old combined YAML config to migrate (./.gitmirror.yml)
    ADMIN_HOST / ADMIN_PORT

Relative paths are resolved against the project root.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _path_env(name: str, default: str, root: Path) -> Path:
    path = Path(os.environ.get(name) or default).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


@dataclass
class Settings:
    """Everything the service needs to find its data and talk to git."""

    project_root: Path
    data_dir: Path
    work_dir: Path
    legacy_config_path: Path
    git_timeout: int = 300
    git_local_timeout: int = 30
    sync_workers: int = 4
    admin_host: str = "127.0.0.1"
    admin_port: int = 3001

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> "Settings":
        root = Path(project_root) if project_root else Path.cwd()
        return cls(
            project_root=root,
            data_dir=_path_env("DATA_DIR", "data", root),
            work_dir=_path_env("WORK_DIR", "repos", root),
            legacy_config_path=_path_env("LEGACY_CONFIG_PATH", ".gitmirror.yml", root),
            git_timeout=max(1, _int_env("GIT_TIMEOUT", 300)),
            git_local_timeout=max(1, _int_env("GIT_LOCAL_TIMEOUT", 30)),
            sync_workers=max(1, _int_env("SYNC_WORKERS", 4)),
            admin_host=os.environ.get("ADMIN_HOST", "127.0.0.1"),
            admin_port=_int_env("ADMIN_PORT", 3001),
        )

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.work_dir.mkdir(parents=True, exist_ok=True)
