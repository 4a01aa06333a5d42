"""
Shared fixtures.

Provides temp data/work directories, an in-memory stand-in for the git
capability (no subprocess, no network), stores and a wired Services
object, and a Flask test app on top of it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from gitmirror.config.settings import Settings
from gitmirror.persistence.config_store import ConfigStore
from gitmirror.persistence.platforms import PlatformStore
from gitmirror.persistence.repositories import RepositoryStore
from gitmirror.services import Services
from gitmirror.sync.errors import RepositoryStateError


# ─── Fake git ────────────────────────────────────────────────────


class FakeRemote:
    """A remote repository: its branches and default branch."""

    def __init__(self, branches: List[str], default: Optional[str] = None):
        self.branches = list(branches)
        self.default = default or (branches[0] if branches else None)


class FakeGit:
    """
    In-memory git capability with the GitOperations interface.

    Remotes are keyed by repository path ("org/repo"), taken from the end
    of whatever URL is used, so a rotated token still reaches the same
    remote. Set `fail[<method>] = exc` to make a method raise, and
    `push_fail[<remote name>] = exc` to fail pushes to one remote.
    """

    def __init__(self):
        self.remotes: Dict[str, FakeRemote] = {}
        self.copies: Dict[Path, dict] = {}
        self.calls: List[tuple] = []
        self.pushes: List[tuple] = []
        self.fail: Dict[str, Exception] = {}
        self.push_fail: Dict[str, Exception] = {}

    # -- helpers for tests --

    def add_remote_repo(self, path: str, branches: List[str], default: Optional[str] = None):
        self.remotes[path] = FakeRemote(branches, default)

    def _remote_for(self, url: str) -> FakeRemote:
        tail = url.rstrip("/")
        if tail.endswith(".git"):
            tail = tail[:-4]
        key = "/".join(tail.split("/")[-2:])
        return self.remotes[key]

    def _maybe_fail(self, method: str) -> None:
        self.calls.append((method,))
        if method in self.fail:
            raise self.fail[method]

    # -- GitOperations interface --

    def version(self) -> Optional[str]:
        return "git version 2.43.0"

    def is_repo(self, path: Path) -> bool:
        return Path(path) in self.copies

    def clone(self, url: str, path: Path) -> None:
        self._maybe_fail("clone")
        remote = self._remote_for(url)
        self.copies[Path(path)] = {
            "remotes": {"origin": url},
            "local": [remote.default] if remote.default else [],
            "current": remote.default,
        }

    def list_remotes(self, path: Path) -> List[str]:
        return list(self.copies[Path(path)]["remotes"])

    def get_remote_url(self, path: Path, name: str) -> Optional[str]:
        return self.copies[Path(path)]["remotes"].get(name)

    def add_remote(self, path: Path, name: str, url: str) -> None:
        self.calls.append(("add_remote", name))
        remotes = self.copies[Path(path)]["remotes"]
        if name in remotes:
            raise RepositoryStateError("git remote failed", f"remote {name} already exists")
        remotes[name] = url

    def remove_remote(self, path: Path, name: str) -> None:
        self.calls.append(("remove_remote", name))
        self.copies[Path(path)]["remotes"].pop(name)

    def fetch(self, path: Path, remote: str = "origin") -> None:
        self._maybe_fail("fetch")

    def list_remote_branches(self, path: Path, remote: str = "origin") -> List[str]:
        url = self.copies[Path(path)]["remotes"][remote]
        return list(self._remote_for(url).branches)

    def remote_default_branch(self, path: Path, remote: str = "origin") -> Optional[str]:
        url = self.copies[Path(path)]["remotes"][remote]
        return self._remote_for(url).default

    def list_local_branches(self, path: Path) -> List[str]:
        return list(self.copies[Path(path)]["local"])

    def current_branch(self, path: Path) -> Optional[str]:
        return self.copies[Path(path)]["current"]

    def head_commit(self, path: Path) -> Optional[str]:
        return "0123456789abcdef0123456789abcdef01234567"

    def checkout(self, path: Path, branch: str, create_from: Optional[str] = None) -> None:
        self.calls.append(("checkout", branch, create_from))
        copy = self.copies[Path(path)]
        if create_from:
            if branch in copy["local"]:
                raise RepositoryStateError("git checkout failed", f"branch {branch} exists")
            copy["local"].append(branch)
        elif branch not in copy["local"]:
            raise RepositoryStateError("git checkout failed", f"no branch {branch}")
        copy["current"] = branch

    def pull(self, path: Path, remote: str, branch: str) -> None:
        self._maybe_fail("pull")

    def push(self, path: Path, remote: str, branch: str) -> None:
        self.calls.append(("push", remote, branch))
        if remote in self.push_fail:
            raise self.push_fail[remote]
        self.pushes.append((remote, branch))


# ─── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "repos"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path: Path, data_dir: Path, work_dir: Path) -> Settings:
    return Settings(
        project_root=tmp_path,
        data_dir=data_dir,
        work_dir=work_dir,
        legacy_config_path=tmp_path / ".gitmirror.yml",
        sync_workers=2,
    )


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def platforms(data_dir: Path) -> PlatformStore:
    store = PlatformStore(data_dir)
    store.seed_builtin()
    return store


@pytest.fixture
def repositories(data_dir: Path) -> RepositoryStore:
    return RepositoryStore(data_dir)


@pytest.fixture
def config_store(data_dir: Path) -> ConfigStore:
    return ConfigStore(data_dir)


@pytest.fixture
def services(settings: Settings, fake_git: FakeGit):
    """Services wired to the fake git, bootstrapped with built-in platforms."""
    svc = Services(settings, git=fake_git)
    svc.bootstrap()
    yield svc
    svc.shutdown()


@pytest.fixture
def app(services: Services):
    """Flask test app backed by the temp services."""
    pytest.importorskip("flask")
    from gitmirror.admin.server import create_app

    app = create_app(services)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
