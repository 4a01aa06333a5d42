"""
Tests for the git CLI wrapper.

subprocess.run is mocked throughout; no git binary is needed.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest import mock

import pytest

from gitmirror.sync.errors import (
    AuthError,
    CloneError,
    DivergedHistoryError,
    GitTimeoutError,
    RepositoryStateError,
    TransportError,
)
from gitmirror.sync.git_ops import GitOperations

RUN = "gitmirror.sync.git_ops.subprocess.run"


def _done(stdout: str = "", stderr: str = "", code: int = 0):
    return subprocess.CompletedProcess(args=[], returncode=code, stdout=stdout, stderr=stderr)


@pytest.fixture
def git():
    return GitOperations(network_timeout=120, local_timeout=10)


class TestRun:
    def test_network_ops_use_network_timeout(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.fetch(tmp_path, "origin")
        assert run.call_args.kwargs["timeout"] == 120
        assert run.call_args.args[0] == ["git", "fetch", "--prune", "--no-progress", "origin"]

    def test_local_ops_use_local_timeout(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.add_remote(tmp_path, "mirror-gitee", "https://t@gitee.com/o/r.git")
        assert run.call_args.kwargs["timeout"] == 10

    def test_never_prompts_for_credentials(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.fetch(tmp_path)
        assert run.call_args.kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"

    def test_timeout_raises_git_timeout(self, git, tmp_path):
        exc = subprocess.TimeoutExpired(cmd="git", timeout=120)
        with mock.patch(RUN, side_effect=exc):
            with pytest.raises(GitTimeoutError):
                git.fetch(tmp_path)

    def test_missing_binary_raises_state_error(self, tmp_path):
        git = GitOperations(git_binary="no-such-git")
        with mock.patch(RUN, side_effect=FileNotFoundError("no-such-git")):
            with pytest.raises(RepositoryStateError):
                git.fetch(tmp_path)


class TestErrorClassification:
    def test_auth_failure(self, git, tmp_path):
        stderr = "remote: Invalid username or password.\nfatal: Authentication failed for 'https://***@github.com/o/r.git/'"
        with mock.patch(RUN, return_value=_done(stderr=stderr, code=128)):
            with pytest.raises(AuthError):
                git.fetch(tmp_path)

    def test_http_403_is_auth(self, git, tmp_path):
        stderr = "fatal: unable to access 'https://x@gitee.com/o/r.git/': The requested URL returned error: 403"
        with mock.patch(RUN, return_value=_done(stderr=stderr, code=128)):
            with pytest.raises(AuthError):
                git.push(tmp_path, "mirror-gitee", "main")

    def test_non_fast_forward_pull(self, git, tmp_path):
        stderr = "fatal: Not possible to fast-forward, aborting."
        with mock.patch(RUN, return_value=_done(stderr=stderr, code=128)):
            with pytest.raises(DivergedHistoryError):
                git.pull(tmp_path, "origin", "main")

    def test_clone_transport_failure_is_clone_error(self, git, tmp_path):
        stderr = "fatal: could not resolve host: github.com"
        with mock.patch(RUN, return_value=_done(stderr=stderr, code=128)):
            with pytest.raises(CloneError):
                git.clone("https://t@github.com/o/r.git", tmp_path / "copy")

    def test_unknown_local_failure(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done(stderr="error: pathspec 'x' did not match", code=1)):
            with pytest.raises(RepositoryStateError):
                git.checkout(tmp_path, "x")

    def test_network_failure_on_fetch_is_transport(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done(stderr="fatal: early EOF", code=128)):
            with pytest.raises(TransportError):
                git.fetch(tmp_path)

    def test_token_not_in_error(self, git, tmp_path):
        stderr = "fatal: unable to access 'https://supersecret@host/o/r.git/': Could not resolve host"
        with mock.patch(RUN, return_value=_done(stderr=stderr, code=128)):
            with pytest.raises(TransportError) as exc_info:
                git.fetch(tmp_path)
        assert "supersecret" not in str(exc_info.value)


class TestInspection:
    def test_is_repo_false_without_git_dir(self, git, tmp_path):
        with mock.patch(RUN) as run:
            assert git.is_repo(tmp_path) is False
        run.assert_not_called()

    def test_is_repo_true(self, git, tmp_path):
        (tmp_path / ".git").mkdir()
        with mock.patch(RUN, return_value=_done(stdout="true\n")):
            assert git.is_repo(tmp_path) is True

    def test_list_remote_branches_strips_prefix_and_head(self, git, tmp_path):
        out = "refs/remotes/origin/HEAD\nrefs/remotes/origin/main\nrefs/remotes/origin/feature/x\n"
        with mock.patch(RUN, return_value=_done(stdout=out)):
            assert git.list_remote_branches(tmp_path) == ["main", "feature/x"]

    def test_get_remote_url_missing(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done(stderr="error: No such remote 'origin'", code=2)):
            assert git.get_remote_url(tmp_path, "origin") is None

    def test_remote_default_branch(self, git, tmp_path):
        with mock.patch(RUN, side_effect=[_done(), _done(stdout="origin/trunk\n")]):
            assert git.remote_default_branch(tmp_path) == "trunk"

    def test_remote_default_branch_uses_local_record_when_set_head_fails(self, git, tmp_path):
        results = [_done(stderr="fatal: early EOF", code=128), _done(stdout="origin/main\n")]
        with mock.patch(RUN, side_effect=results):
            assert git.remote_default_branch(tmp_path) == "main"

    def test_version_none_when_git_missing(self, git):
        with mock.patch(RUN, side_effect=FileNotFoundError("git")):
            assert git.version() is None


class TestMutation:
    def test_push_names_ref_explicitly_and_never_forces(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.push(tmp_path, "mirror-gitee", "main")
        args = run.call_args.args[0]
        assert args[-1] == "refs/heads/main:refs/heads/main"
        assert "--force" not in args and "-f" not in args

    def test_pull_is_fast_forward_only(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.pull(tmp_path, "origin", "main")
        assert "--ff-only" in run.call_args.args[0]

    def test_checkout_creates_tracking_branch(self, git, tmp_path):
        with mock.patch(RUN, return_value=_done()) as run:
            git.checkout(tmp_path, "dev", create_from="origin/dev")
        assert run.call_args.args[0] == ["git", "checkout", "-b", "dev", "--track", "origin/dev"]

    def test_clone_passes_cwd_none(self, git, tmp_path):
        target = tmp_path / "copy"
        with mock.patch(RUN, return_value=_done()) as run:
            git.clone("https://t@github.com/o/r.git", target)
        assert run.call_args.kwargs["cwd"] is None
        assert run.call_args.args[0][-1] == str(target)
