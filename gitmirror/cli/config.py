"""
CLI config commands — show and edit app config, check the registry, migrate.

Usage:
    python -m gitmirror.main config-show [--json]
    python -m gitmirror.main config-set KEY VALUE
    python -m gitmirror.main check-config [--json]
    python -m gitmirror.main migrate [--from FILE]
"""

from __future__ import annotations

import json as json_lib
import sys
from pathlib import Path

import click
import yaml

from .helpers import get_services


@click.command("config-show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show the app configuration."""
    services = get_services(ctx)
    config = services.config.get().to_record()

    if as_json:
        click.echo(json_lib.dumps(config, indent=2))
        return

    click.echo("\n⚙️  Configuration\n")
    for key, value in config.items():
        click.echo(f"  {key:<20} {value}")
    click.echo()


@click.command("config-set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """
    Set one config key.

    VALUE is parsed as YAML, so `true`, `7200` and `prefer_source` all
    get the right type.
    """
    from pydantic import ValidationError

    from ..models.config import AppConfig

    if key not in AppConfig.model_fields:
        click.secho(f"✗ Unknown key: {key}", fg="red")
        click.echo(f"  Known keys: {', '.join(AppConfig.model_fields)}")
        sys.exit(1)

    services = get_services(ctx)
    try:
        config = services.config.update({key: yaml.safe_load(value)})
    except (ValidationError, yaml.YAMLError) as e:
        click.secho(f"✗ Invalid value for {key}: {e}", fg="red")
        sys.exit(1)

    click.secho(f"✓ {key} = {config.to_record()[key]}", fg="green")


@click.command("check-config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_config(ctx: click.Context, as_json: bool) -> None:
    """Check platforms and repositories for problems that would break a sync."""
    from ..config.validator import LEVEL_ERROR, LEVEL_WARNING

    services = get_services(ctx)
    issues = services.issues()

    if as_json:
        click.echo(json_lib.dumps([i.to_dict() for i in issues], indent=2))
    else:
        click.echo("\n📋 Registry Check\n")
        if not issues:
            click.secho("  ✓ No problems found", fg="green")
        for issue in issues:
            subject = issue.repository_id or issue.platform_id or "-"
            if issue.level == LEVEL_ERROR:
                click.secho(f"  ✗ {subject}", fg="red", nl=False)
            elif issue.level == LEVEL_WARNING:
                click.secho(f"  ⚠ {subject}", fg="yellow", nl=False)
            else:
                click.secho(f"  ℹ {subject}", fg="blue", nl=False)
            click.echo(f" — {issue.message}")

        errors = sum(1 for i in issues if i.level == LEVEL_ERROR)
        warnings = sum(1 for i in issues if i.level == LEVEL_WARNING)
        click.echo()
        click.secho(f"Summary: {errors} errors, {warnings} warnings", bold=True)

    if any(i.level == LEVEL_ERROR for i in issues):
        sys.exit(1)


@click.command("migrate")
@click.option(
    "--from", "legacy_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Legacy YAML config (default: LEGACY_CONFIG_PATH)",
)
@click.pass_context
def migrate(ctx: click.Context, legacy_path: Path | None) -> None:
    """Move repositories out of a legacy combined config."""
    from ..persistence.migration import migrate_legacy_config

    services = get_services(ctx, migrate=False)
    result = migrate_legacy_config(
        services.repositories,
        services.config,
        legacy_path or services.settings.legacy_config_path,
    )

    if result.count:
        click.secho(f"✓ Migrated {result.count} repositories from {result.source}", fg="green")
        for repo_id in result.migrated:
            click.echo(f"    {repo_id}")
    else:
        click.echo(f"Nothing migrated ({result.reason or 'no valid entries'})")

    for entry in result.skipped:
        click.secho(f"  ⚠ skipped {entry}", fg="yellow")
