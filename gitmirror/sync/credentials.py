"""
Credential URLs — Build token-bearing git transport URLs per platform.

The produced URL embeds a secret. It must only ever be handed to git,
never logged above DEBUG. Use redact() on anything that may contain one.
"""

from __future__ import annotations

import re

from ..models.platform import Platform, UrlScheme

# scheme://userinfo@  →  scheme://***@
_USERINFO_RE = re.compile(r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/@\s]+@")


def host_of(base_url: str) -> str:
    """Strip the scheme and trailing slash: https://github.com/ → github.com."""
    host = base_url.strip()
    if "://" in host:
        host = host.split("://", 1)[1]
    return host.rstrip("/")


def build_url(platform: Platform, path: str) -> str:
    """
    Build the authenticated https URL for `path` on `platform`.

    Raises:
        UnsupportedPlatformError: if the platform's url scheme is unknown.
    """
    from .errors import UnsupportedPlatformError

    token = platform.auth_token or ""
    host = host_of(platform.base_url)
    path = path.strip("/")

    scheme = platform.url_scheme
    if scheme == UrlScheme.GITHUB:
        return f"https://{token}:x-oauth-basic@{host}/{path}.git"
    if scheme == UrlScheme.GITEE:
        return f"https://{token}@{host}/{path}.git"
    if scheme == UrlScheme.OAUTH2:
        return f"https://oauth2:{token}@{host}/{path}.git"
    if scheme == UrlScheme.GENERIC:
        return f"https://{token}@{host}/{path}.git"

    raise UnsupportedPlatformError(
        f"Unsupported url scheme for platform {platform.id}", str(scheme)
    )


def redact(text: str) -> str:
    """Replace credentials embedded in URLs with ***."""
    if not text:
        return text
    return _USERINFO_RE.sub(r"\g<scheme>***@", text)
