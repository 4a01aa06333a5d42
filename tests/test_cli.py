"""
Tests for CLI commands.

Uses Click's CliRunner with the temp Services injected via ctx.obj, so
no command touches the real data directory, git, or the network.
"""

from __future__ import annotations

import json
from unittest import mock

import pytest
from click.testing import CliRunner

from gitmirror.adapters.platform_api import TokenValidation
from gitmirror.main import cli


@pytest.fixture
def run(services):
    def _run(args: list, input: str | None = None):
        runner = CliRunner()
        return runner.invoke(cli, args, obj={"services": services}, input=input)
    return _run


class TestRepoCommands:
    def test_add_and_list(self, run):
        result = run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app",
                      "--branch", "develop", "--branch", "main"])
        assert result.exit_code == 0, result.output
        assert "source-github-org-app" in result.output

        result = run(["repo-list", "--json"])
        data = json.loads(result.output)
        assert data[0]["branches"] == ["develop", "main"]

    def test_add_unknown_platform(self, run):
        result = run(["repo-add", "--role", "source", "--platform", "nope", "--path", "org/app"])
        assert result.exit_code == 1
        assert "Unknown platform" in result.output

    def test_remove(self, run, services):
        run(["repo-add", "--role", "mirror", "--platform", "gitee", "--path", "org/app"])
        result = run(["repo-remove", "mirror-gitee-org-app"])
        assert result.exit_code == 0
        assert services.repositories.list() == []

    def test_remove_unknown(self, run):
        assert run(["repo-remove", "nope"]).exit_code == 1


class TestSyncCommands:
    def test_sync_wait_success(self, run, services, fake_git):
        services.platforms.set_token("github", "ghp")
        fake_git.add_remote_repo("org/app", ["main"])
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app"])

        result = run(["sync", "source-github-org-app", "--wait"])

        assert result.exit_code == 0, result.output
        assert "success" in result.output

    def test_sync_wait_failure_exits_nonzero(self, run, fake_git):
        # github has no token
        fake_git.add_remote_repo("org/app", ["main"])
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app"])

        result = run(["sync", "source-github-org-app", "--wait"])

        assert result.exit_code == 1
        assert "failed" in result.output

    def test_sync_unknown(self, run):
        result = run(["sync", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_sync_all_wait(self, run, services, fake_git):
        services.platforms.set_token("github", "ghp")
        fake_git.add_remote_repo("org/app", ["main"])
        fake_git.add_remote_repo("org/lib", ["master"])
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app"])
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/lib"])

        result = run(["sync-all", "--wait"])

        assert result.exit_code == 0, result.output
        assert "Scheduled 2" in result.output

    def test_status_json(self, run):
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app"])
        result = run(["status", "--json"])
        assert json.loads(result.output) == [
            {"id": "source-github-org-app", "status": "idle", "lastSyncedAt": None}
        ]

    def test_status_empty(self, run):
        result = run(["status"])
        assert result.exit_code == 0
        assert "No repositories registered" in result.output


class TestPlatformCommands:
    def test_list_masks_tokens(self, run, services):
        services.platforms.set_token("github", "ghp_0123456789abcdef")
        result = run(["platform-list", "--json"])
        assert "ghp_0123456789abcdef" not in result.output
        assert "****cdef" in result.output

    def test_add_and_remove(self, run, services):
        result = run(["platform-add", "corp", "--name", "Corp", "--base-url", "https://git.corp",
                      "--scheme", "oauth2-style"])
        assert result.exit_code == 0, result.output
        assert services.platforms.get_by_id("corp") is not None

        assert run(["platform-remove", "corp"]).exit_code == 0
        assert services.platforms.get_by_id("corp") is None

    def test_remove_builtin_refused(self, run):
        result = run(["platform-remove", "github"])
        assert result.exit_code == 1

    def test_set_token_prompts(self, run, services):
        result = run(["platform-set-token", "gitee"], input="secret-token-value\n")
        assert result.exit_code == 0, result.output
        assert services.platforms.get_by_id("gitee").auth_token == "secret-token-value"
        assert "secret-token-value" not in result.output

    def test_validate(self, run):
        result_obj = TokenValidation(valid=False, status_code=401, error="HTTP 401")
        with mock.patch("gitmirror.adapters.platform_api.validate_token", return_value=result_obj):
            result = run(["platform-validate", "github"])
        assert result.exit_code == 1
        assert "HTTP 401" in result.output


class TestConfigCommands:
    def test_show_json(self, run):
        data = json.loads(run(["config-show", "--json"]).output)
        assert data["sync_interval"] == 3600

    def test_set_parses_values(self, run, services):
        assert run(["config-set", "auto_sync", "false"]).exit_code == 0
        assert run(["config-set", "sync_interval", "7200"]).exit_code == 0
        config = services.config.get()
        assert config.auto_sync is False
        assert config.sync_interval == 7200

    def test_set_invalid(self, run):
        assert run(["config-set", "sync_interval", "5"]).exit_code == 1
        assert run(["config-set", "nope", "1"]).exit_code == 1

    def test_check_config_errors_exit_nonzero(self, run):
        run(["repo-add", "--role", "source", "--platform", "github", "--path", "org/app"])
        result = run(["check-config"])
        assert result.exit_code == 1
        assert "no token" in result.output

    def test_check_config_clean(self, run):
        result = run(["check-config"])
        assert result.exit_code == 0
        assert "No problems found" in result.output

    def test_migrate_from_yaml(self, run, services, tmp_path):
        legacy = tmp_path / "old.yml"
        legacy.write_text("sources:\n  - platform: github\n    repo: org/app\n")
        result = run(["migrate", "--from", str(legacy)])
        assert result.exit_code == 0, result.output
        assert "Migrated 1" in result.output
        assert services.repositories.get_by_id("source-github-org-app") is not None
