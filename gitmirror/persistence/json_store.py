"""
JSON File Store — Safe read / atomic write helpers shared by all stores.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A store operation was rejected (duplicate id, unknown id, ...)."""


class NotFoundError(StoreError):
    pass


class DuplicateError(StoreError):
    pass


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def read_json(path: Path, default: Any) -> Any:
    """
    Read a JSON file.

    A missing file is created with `default`. A corrupt file is logged
    and reset to `default` so the service can keep running.
    """
    if not path.exists():
        logger.warning(f"Data file missing, creating: {path}")
        write_json(path, default)
        return default

    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Corrupt data file {path}: {e}; resetting")
        write_json(path, default)
        return default


def write_json(path: Path, data: Any) -> None:
    """Write JSON atomically (temp file, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")

    with temp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")

    temp_path.replace(path)
