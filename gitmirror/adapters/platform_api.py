"""
Platform API — Check that a platform token is accepted.

Calls the platform's "current user" endpoint. Never raises on network
trouble; the result says what happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..models.platform import Platform, UrlScheme

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


@dataclass
class TokenValidation:
    valid: bool
    status_code: Optional[int] = None
    username: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "status_code": self.status_code,
            "username": self.username,
            "error": self.error,
        }


def _request_args(platform: Platform) -> Dict[str, Any]:
    token = platform.auth_token or ""
    if platform.url_scheme == UrlScheme.GITEE:
        return {"params": {"access_token": token}, "headers": {}}
    if platform.url_scheme == UrlScheme.OAUTH2:
        return {"params": {}, "headers": {"PRIVATE-TOKEN": token}}
    return {"params": {}, "headers": {"Authorization": f"token {token}"}}


def validate_token(platform: Platform, timeout: int = DEFAULT_TIMEOUT) -> TokenValidation:
    """GET {api_url}/user with the platform's token."""
    if not platform.has_token:
        return TokenValidation(valid=False, error="no token configured")
    if not platform.api_url:
        return TokenValidation(valid=False, error="platform has no apiUrl")

    url = platform.api_url.rstrip("/") + "/user"
    args = _request_args(platform)
    args["headers"]["Accept"] = "application/json"

    try:
        resp = requests.get(url, timeout=timeout, **args)
    except requests.RequestException as e:
        logger.warning(f"Token validation for {platform.id} failed: {type(e).__name__}")
        return TokenValidation(valid=False, error=f"request failed: {type(e).__name__}")

    if resp.status_code == 200:
        username = None
        try:
            body = resp.json()
            username = body.get("login") or body.get("username")
        except ValueError:
            pass
        logger.info(f"Token for {platform.id} is valid ({username or 'unknown user'})")
        return TokenValidation(valid=True, status_code=200, username=username)

    logger.info(f"Token for {platform.id} rejected: HTTP {resp.status_code}")
    return TokenValidation(
        valid=False, status_code=resp.status_code, error=f"HTTP {resp.status_code}"
    )
