"""
gitmirror — CLI Entry Point

Usage:
    python -m gitmirror.main sync REPO_ID [--wait]
    python -m gitmirror.main sync-all [--wait]
    python -m gitmirror.main status [REPO_ID] [--json]
    python -m gitmirror.main repo-add --role source --platform github --path org/repo
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import click

from .logging_config import setup_logging
from .cli.config import check_config, config_set, config_show, migrate
from .cli.platforms import (
    platform_add,
    platform_list,
    platform_remove,
    platform_set_token,
    platform_validate,
)
from .cli.repos import repo_add, repo_list, repo_remove
from .cli.sync import status, sync, sync_all

# Initialize logging
setup_logging()


def get_project_root() -> Path:
    """Get the project root directory (relative DATA_DIR/WORK_DIR resolve here)."""
    return Path.cwd()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """gitmirror — Keep repositories in sync across git hosting platforms."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("root", get_project_root())


# ─── Sync ───
cli.add_command(sync)
cli.add_command(sync_all)
cli.add_command(status)

# ─── Repositories ───
cli.add_command(repo_list)
cli.add_command(repo_add)
cli.add_command(repo_remove)

# ─── Platforms ───
cli.add_command(platform_list)
cli.add_command(platform_add)
cli.add_command(platform_set_token)
cli.add_command(platform_remove)
cli.add_command(platform_validate)

# ─── Config ───
cli.add_command(config_show)
cli.add_command(config_set)
cli.add_command(check_config)
cli.add_command(migrate)


if __name__ == "__main__":
    cli()
