"""
CLI sync commands — trigger syncs and show repository status.

Usage:
    python -m gitmirror.main sync REPO_ID [--wait]
    python -m gitmirror.main sync-all [--wait]
    python -m gitmirror.main status [REPO_ID] [--json]

Without --wait the command returns as soon as the job is scheduled; the
process still lets running jobs finish before it exits.
"""

from __future__ import annotations

import json as json_lib
import sys

import click

from .helpers import get_services, status_icon


def _wait_and_report(services, repo_ids) -> bool:
    """Wait for running jobs, print final statuses. True if none failed."""
    services.coordinator.wait()
    ok = True
    for repo_id in repo_ids:
        info = services.coordinator.status(repo_id)
        icon = status_icon(info["status"])
        click.echo(f"  {icon} {repo_id}: {info['status']}")
        if info["status"] == "failed":
            ok = False
    return ok


@click.command("sync")
@click.argument("repo_id")
@click.option("--wait", is_flag=True, help="Block until the sync finishes")
@click.pass_context
def sync(ctx: click.Context, repo_id: str, wait: bool) -> None:
    """Sync one repository (and its mirrors, if it is a source)."""
    from ..sync.errors import RepositoryNotFoundError

    services = get_services(ctx)
    try:
        ack = services.coordinator.sync_one(repo_id)
    except RepositoryNotFoundError:
        click.secho(f"Repository not found: {repo_id}", fg="red")
        sys.exit(1)

    if not ack.accepted:
        click.secho(f"⏳ {repo_id} is already syncing", fg="yellow")
        return

    click.echo(f"🔄 Sync scheduled: {repo_id}")
    if wait and not _wait_and_report(services, [repo_id]):
        sys.exit(1)


@click.command("sync-all")
@click.option("--wait", is_flag=True, help="Block until all syncs finish")
@click.pass_context
def sync_all(ctx: click.Context, wait: bool) -> None:
    """Sync every registered repository."""
    services = get_services(ctx)
    scheduled = services.coordinator.sync_all()
    click.echo(f"🔄 Scheduled {scheduled} repositories")

    if wait and scheduled:
        repo_ids = [r.id for r in services.repositories.list()]
        if not _wait_and_report(services, repo_ids):
            sys.exit(1)


@click.command("status")
@click.argument("repo_id", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, repo_id: str | None, as_json: bool) -> None:
    """Show last known sync status of one or all repositories."""
    from ..sync.errors import RepositoryNotFoundError

    services = get_services(ctx)

    if repo_id:
        try:
            entries = [services.coordinator.status(repo_id)]
        except RepositoryNotFoundError:
            click.secho(f"Repository not found: {repo_id}", fg="red")
            sys.exit(1)
    else:
        entries = [services.coordinator.status(r.id) for r in services.repositories.list()]

    if as_json:
        click.echo(json_lib.dumps(entries, indent=2))
        return

    click.echo("\n📦 Repository Status\n")
    if not entries:
        click.echo("  No repositories registered.")
        click.echo("  Add one with: gitmirror repo-add --role source --platform github --path org/repo")
        click.echo()
        return

    for entry in entries:
        line = f"  {status_icon(entry['status'])} {entry['id']}: {entry['status']}"
        if entry.get("lastSyncedAt"):
            line += f" [{entry['lastSyncedAt'][:19]}]"
        click.echo(line)
    click.echo()
