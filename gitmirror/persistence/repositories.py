"""
Repository Store — data/repositories.json.

Also the status store: update_status() is the only way sync status is
written, and the transition is on disk when it returns.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.repository import Repository, SyncStatus, make_repository_id
from .json_store import DuplicateError, NotFoundError, read_json, utc_now_iso, write_json

logger = logging.getLogger(__name__)

FILENAME = "repositories.json"

# Identity fields are immutable; delete and re-add to change them
_IMMUTABLE = {"id", "role", "platform_id", "platformId", "path"}


class RepositoryStore:
    """CRUD over registered repositories. Writes are serialized."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / FILENAME
        self._lock = threading.RLock()

    def _load(self) -> List[Repository]:
        repos = []
        for record in read_json(self.path, []):
            try:
                repos.append(Repository.model_validate(record))
            except ValueError as e:
                logger.error(f"Ignoring invalid repository record {record.get('id')!r}: {e}")
        return repos

    def _save(self, repos: List[Repository]) -> None:
        write_json(self.path, [r.to_record() for r in repos])

    def list(self) -> List[Repository]:
        with self._lock:
            return self._load()

    def get_by_id(self, repository_id: str) -> Optional[Repository]:
        for repo in self.list():
            if repo.id == repository_id:
                return repo
        return None

    def add(self, data: Dict[str, Any]) -> Repository:
        """
        Register a repository from a dict (camelCase or snake_case keys).

        The id is always derived from role, platform and path.
        """
        record = dict(data)
        if "platform_id" in record:
            record.setdefault("platformId", record.pop("platform_id"))
        record["status"] = SyncStatus.IDLE.value
        record["createdAt"] = utc_now_iso()
        record["id"] = ""

        repo = Repository.model_validate(record)
        repo = repo.model_copy(
            update={"id": make_repository_id(repo.role, repo.platform_id, repo.path)}
        )

        with self._lock:
            repos = self._load()
            for existing in repos:
                if existing.id == repo.id or (
                    (existing.role, existing.platform_id, existing.path)
                    == (repo.role, repo.platform_id, repo.path)
                ):
                    raise DuplicateError(
                        f"{repo.role.value} {repo.platform_id}/{repo.path} is already registered"
                    )
            repos.append(repo)
            self._save(repos)

        logger.info(f"Repository registered: {repo.id}")
        return repo

    def update(self, repository_id: str, changes: Dict[str, Any]) -> Repository:
        bad = _IMMUTABLE & set(changes)
        if bad:
            raise ValueError(f"Cannot change identity fields: {', '.join(sorted(bad))}")

        with self._lock:
            repos = self._load()
            for i, existing in enumerate(repos):
                if existing.id != repository_id:
                    continue
                record = existing.to_record()
                record.update(changes)
                record["updatedAt"] = utc_now_iso()
                updated = Repository.model_validate(record)
                repos[i] = updated
                self._save(repos)
                return updated
        raise NotFoundError(f"Repository not found: {repository_id}")

    def update_status(self, repository_id: str, status: SyncStatus, timestamp: str) -> Repository:
        status = SyncStatus(status)
        with self._lock:
            repos = self._load()
            for i, existing in enumerate(repos):
                if existing.id != repository_id:
                    continue
                changes = {"status": status, "status_updated_at": timestamp}
                if status in (SyncStatus.SUCCESS, SyncStatus.FAILED):
                    changes["last_synced_at"] = timestamp
                updated = existing.model_copy(update=changes)
                repos[i] = updated
                self._save(repos)
                logger.debug(f"Status {repository_id} → {status.value}")
                return updated
        raise NotFoundError(f"Repository not found: {repository_id}")

    def delete(self, repository_id: str) -> None:
        with self._lock:
            repos = self._load()
            remaining = [r for r in repos if r.id != repository_id]
            if len(remaining) == len(repos):
                raise NotFoundError(f"Repository not found: {repository_id}")
            self._save(remaining)
        logger.info(f"Repository deleted: {repository_id}")
