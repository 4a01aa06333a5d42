"""
Config Store — data/config.json.

Unknown keys (e.g. legacy sources/mirrors lists awaiting migration) are
preserved on disk; only AppConfig fields are validated.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from ..models.config import AppConfig
from .json_store import read_json, write_json

logger = logging.getLogger(__name__)

FILENAME = "config.json"


class ConfigStore:
    """Editable app configuration."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / FILENAME
        self._lock = threading.RLock()

    def raw(self) -> Dict[str, Any]:
        with self._lock:
            data = read_json(self.path, AppConfig().to_record())
        return data if isinstance(data, dict) else {}

    def get(self) -> AppConfig:
        known = {k: v for k, v in self.raw().items() if k in AppConfig.model_fields}
        try:
            return AppConfig(**known)
        except ValidationError as e:
            logger.error(f"Invalid config in {self.path}, using defaults: {e}")
            return AppConfig()

    def update(self, changes: Dict[str, Any]) -> AppConfig:
        """Merge and validate. Raises pydantic ValidationError on bad values."""
        with self._lock:
            data = self.raw()
            data.update(changes)
            known = {k: v for k, v in data.items() if k in AppConfig.model_fields}
            config = AppConfig(**known)
            data.update(config.to_record())
            write_json(self.path, data)
        logger.info(f"Config updated: {', '.join(sorted(changes))}")
        return config

    def replace_raw(self, data: Dict[str, Any]) -> None:
        with self._lock:
            write_json(self.path, data)

    def reset(self) -> AppConfig:
        config = AppConfig()
        with self._lock:
            write_json(self.path, config.to_record())
        logger.info("Config reset to defaults")
        return config
