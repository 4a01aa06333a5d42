"""
CLI shared helpers.
"""

from __future__ import annotations

import click

from ..config.settings import Settings
from ..services import Services

STATUS_ICONS = {
    "idle": "⏳",
    "syncing": "🔄",
    "success": "✅",
    "failed": "❌",
    "skipped": "⚠️",
}


def get_services(ctx: click.Context, migrate: bool = True) -> Services:
    """The Services for this invocation, built and bootstrapped on first use."""
    obj = ctx.ensure_object(dict)
    if obj.get("services") is None:
        services = Services.from_settings(Settings.from_env(obj.get("root")))
        services.bootstrap(migrate=migrate)
        obj["services"] = services
    return obj["services"]


def status_icon(status: str) -> str:
    return STATUS_ICONS.get(status, "❓")
