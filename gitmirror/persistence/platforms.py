"""
Platform Store — data/platforms.json.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.platform import BUILTIN_PLATFORMS, Platform
from .json_store import DuplicateError, NotFoundError, StoreError, read_json, write_json

logger = logging.getLogger(__name__)

FILENAME = "platforms.json"

_ALIASES = {
    "base_url": "baseUrl",
    "api_url": "apiUrl",
    "auth_token": "authToken",
    "url_scheme": "urlScheme",
}


def _to_aliases(changes: Dict[str, Any]) -> Dict[str, Any]:
    return {_ALIASES.get(k, k): v for k, v in changes.items()}


class PlatformStore:
    """CRUD over the platform registry. Writes are serialized."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / FILENAME
        self._lock = threading.RLock()

    def _load(self) -> List[Platform]:
        platforms = []
        for record in read_json(self.path, []):
            try:
                platforms.append(Platform.model_validate(record))
            except ValueError as e:
                logger.error(f"Ignoring invalid platform record {record.get('id')!r}: {e}")
        return platforms

    def _save(self, platforms: List[Platform]) -> None:
        write_json(self.path, [p.to_record() for p in platforms])

    def list(self) -> List[Platform]:
        with self._lock:
            return self._load()

    def get_by_id(self, platform_id: str) -> Optional[Platform]:
        for platform in self.list():
            if platform.id == platform_id:
                return platform
        return None

    def add(self, platform: Platform) -> Platform:
        with self._lock:
            platforms = self._load()
            if any(p.id == platform.id for p in platforms):
                raise DuplicateError(f"Platform id '{platform.id}' already exists")
            platforms.append(platform)
            self._save(platforms)
        logger.info(f"Platform added: {platform.id}")
        return platform

    def update(self, platform_id: str, changes: Dict[str, Any]) -> Platform:
        """Merge `changes` (field names or camelCase aliases). id and builtin are fixed."""
        with self._lock:
            platforms = self._load()
            for i, existing in enumerate(platforms):
                if existing.id != platform_id:
                    continue
                record = existing.to_record()
                record.update(_to_aliases(changes))
                record["id"] = existing.id
                record["builtin"] = existing.builtin
                updated = Platform.model_validate(record)
                platforms[i] = updated
                self._save(platforms)
                logger.info(f"Platform updated: {platform_id}")
                return updated
        raise NotFoundError(f"Platform not found: {platform_id}")

    def set_token(self, platform_id: str, token: Optional[str]) -> Platform:
        return self.update(platform_id, {"authToken": token or None})

    def delete(self, platform_id: str) -> None:
        with self._lock:
            platforms = self._load()
            target = next((p for p in platforms if p.id == platform_id), None)
            if target is None:
                raise NotFoundError(f"Platform not found: {platform_id}")
            if target.builtin:
                raise StoreError(f"Built-in platform '{platform_id}' cannot be deleted")
            self._save([p for p in platforms if p.id != platform_id])
        logger.info(f"Platform deleted: {platform_id}")

    def seed_builtin(self) -> int:
        """Add missing built-in platforms. Returns how many were added."""
        with self._lock:
            platforms = self._load()
            known = {p.id for p in platforms}
            added = [p.model_copy() for p in BUILTIN_PLATFORMS if p.id not in known]
            if added:
                self._save(platforms + added)
                logger.info(f"Seeded built-in platforms: {', '.join(p.id for p in added)}")
        return len(added)
