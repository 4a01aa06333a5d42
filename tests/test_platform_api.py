"""
Tests for platform token validation. requests.get is mocked.
"""

from __future__ import annotations

from unittest import mock

import requests

from gitmirror.adapters.platform_api import validate_token
from gitmirror.models.platform import BUILTIN_PLATFORMS

GET = "gitmirror.adapters.platform_api.requests.get"


def _builtin(platform_id: str, token: str | None = "tok"):
    platform = next(p for p in BUILTIN_PLATFORMS if p.id == platform_id)
    return platform.model_copy(update={"auth_token": token})


def _response(status: int, body=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.json.return_value = body or {}
    return resp


class TestValidateToken:
    def test_no_token(self):
        with mock.patch(GET) as get:
            result = validate_token(_builtin("github", None))
        assert result.valid is False
        get.assert_not_called()

    def test_github_valid(self):
        with mock.patch(GET, return_value=_response(200, {"login": "octo"})) as get:
            result = validate_token(_builtin("github"))
        assert result.valid is True
        assert result.username == "octo"
        assert get.call_args.args[0] == "https://api.github.com/user"
        assert get.call_args.kwargs["headers"]["Authorization"] == "token tok"

    def test_gitee_uses_query_param(self):
        with mock.patch(GET, return_value=_response(200, {"login": "g"})) as get:
            validate_token(_builtin("gitee"))
        assert get.call_args.kwargs["params"] == {"access_token": "tok"}

    def test_gitlab_uses_private_token_header(self):
        with mock.patch(GET, return_value=_response(200, {"username": "gl"})) as get:
            result = validate_token(_builtin("gitlab"))
        assert get.call_args.kwargs["headers"]["PRIVATE-TOKEN"] == "tok"
        assert result.username == "gl"

    def test_rejected(self):
        with mock.patch(GET, return_value=_response(401)):
            result = validate_token(_builtin("github"))
        assert result.valid is False
        assert result.status_code == 401

    def test_network_error_reported_not_raised(self):
        with mock.patch(GET, side_effect=requests.ConnectionError("down")):
            result = validate_token(_builtin("github"))
        assert result.valid is False
        assert "ConnectionError" in result.error
