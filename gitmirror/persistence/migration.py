"""
Legacy Migration — Move repositories out of the old combined config.

Older releases kept `sources:` and `mirrors:` lists inside the config
(data/config.json, or the YAML file .gitmirror.yml). They now live in
data/repositories.json. Migration only runs into an empty repository
store; if both exist nothing is touched and a warning is logged.

Each source is consumed once: the lists are stripped from config.json,
and a migrated YAML file is renamed to `<name>.migrated`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..models.repository import DEFAULT_BRANCHES, RepoRole
from .config_store import ConfigStore
from .json_store import StoreError
from .repositories import RepositoryStore

logger = logging.getLogger(__name__)

MIGRATED_SUFFIX = ".migrated"


@dataclass
class MigrationResult:
    migrated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    source: Optional[str] = None
    reason: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.migrated)


def load_legacy_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


def _entries(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    entries = []
    for key, role in (("sources", RepoRole.SOURCE), ("mirrors", RepoRole.MIRROR)):
        for item in data.get(key) or []:
            if not isinstance(item, dict) or not item.get("platform") or not item.get("repo"):
                logger.warning(f"Skipping malformed legacy {key} entry: {item!r}")
                continue
            record = {
                "role": role.value,
                "platformId": item["platform"],
                "path": item["repo"],
            }
            if role == RepoRole.SOURCE:
                record["branches"] = item.get("branches") or list(DEFAULT_BRANCHES)
            entries.append(record)
    return entries


def _mark_consumed(path: Path) -> None:
    """Rename a migrated YAML file so the next startup does not read it again."""
    target = path.with_name(path.name + MIGRATED_SUFFIX)
    try:
        path.replace(target)
        logger.info(f"Renamed {path.name} to {target.name}")
    except OSError as e:
        logger.error(
            f"Could not rename {path} after migration: {e}. "
            f"Delete it manually or its repositories will be migrated again."
        )


def migrate_legacy_config(
    repositories: RepositoryStore,
    config_store: ConfigStore,
    legacy_yaml: Optional[Path] = None,
) -> MigrationResult:
    """
    Register repositories found in the legacy config, then strip them.

    data/config.json is checked first, then `legacy_yaml`.
    """
    config = config_store.raw()
    origin = "config.json"
    legacy = config
    if not (config.get("sources") or config.get("mirrors")) and legacy_yaml is not None:
        legacy = load_legacy_yaml(legacy_yaml)
        origin = str(legacy_yaml)

    entries = _entries(legacy)
    if not entries:
        logger.debug("No legacy repositories to migrate")
        return MigrationResult(reason="nothing to migrate")

    if repositories.list():
        logger.warning(
            "Repository data already exists but the legacy config also lists repositories; "
            "not migrating. Remove one of them manually."
        )
        return MigrationResult(source=origin, reason="repository store not empty")

    logger.info(f"Migrating {len(entries)} repositories from {origin}")
    result = MigrationResult(source=origin)
    for record in entries:
        try:
            repo = repositories.add(record)
            result.migrated.append(repo.id)
        except (StoreError, ValueError) as e:
            logger.warning(f"Could not migrate {record['platformId']}/{record['path']}: {e}")
            result.skipped.append(f"{record['role']}:{record['platformId']}/{record['path']}")

    if origin == "config.json":
        cleaned = {k: v for k, v in config.items() if k not in ("sources", "mirrors")}
        config_store.replace_raw(cleaned)
    else:
        # Carry over the sync settings the YAML file held
        carried = {k: legacy[k] for k in ("auto_sync", "sync_interval") if k in legacy}
        if carried:
            config_store.update(carried)
        _mark_consumed(legacy_yaml)

    logger.info(f"Migration complete: {result.count} migrated, {len(result.skipped)} skipped")
    return result
