"""
CLI repository commands — list, register, and remove repositories.

Usage:
    python -m gitmirror.main repo-list [--json]
    python -m gitmirror.main repo-add --role source --platform github --path org/repo [--branch main ...]
    python -m gitmirror.main repo-remove REPO_ID
"""

from __future__ import annotations

import json as json_lib
import sys

import click

from .helpers import get_services, status_icon


@click.command("repo-list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def repo_list(ctx: click.Context, as_json: bool) -> None:
    """List registered repositories."""
    services = get_services(ctx)
    repos = services.repositories.list()

    if as_json:
        click.echo(json_lib.dumps([r.to_record() for r in repos], indent=2))
        return

    click.echo(f"\n📚 Repositories ({len(repos)})\n")
    for role in ("source", "mirror"):
        group = [r for r in repos if r.role.value == role]
        if not group:
            continue
        click.secho(f"  {role.capitalize()}s", bold=True)
        for repo in group:
            click.echo(
                f"    {status_icon(repo.status.value)} {repo.id}"
                f"  ({repo.platform_id}:{repo.path}, branches: {', '.join(repo.branches)})"
            )
    click.echo()


@click.command("repo-add")
@click.option("--role", type=click.Choice(["source", "mirror"]), required=True)
@click.option("--platform", "platform_id", required=True, help="Platform id (e.g. github)")
@click.option("--path", "path", required=True, help="Repository path, e.g. org/repo")
@click.option("--branch", "branches", multiple=True, help="Candidate branch (repeatable)")
@click.pass_context
def repo_add(ctx: click.Context, role: str, platform_id: str, path: str, branches: tuple) -> None:
    """Register a source or mirror repository."""
    from pydantic import ValidationError

    from ..persistence.json_store import StoreError

    services = get_services(ctx)
    data = {"role": role, "platformId": platform_id, "path": path}
    if branches:
        data["branches"] = list(branches)

    try:
        repo = services.register_repository(data)
    except (StoreError, ValidationError) as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✓ Registered {repo.id}", fg="green")


@click.command("repo-remove")
@click.argument("repo_id")
@click.pass_context
def repo_remove(ctx: click.Context, repo_id: str) -> None:
    """Remove a repository from the registry (the working copy is kept)."""
    from ..persistence.json_store import NotFoundError

    services = get_services(ctx)
    try:
        services.repositories.delete(repo_id)
    except NotFoundError as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✓ Removed {repo_id}", fg="green")
