"""
CLI platform commands — manage hosting platforms and their tokens.

Usage:
    python -m gitmirror.main platform-list [--json]
    python -m gitmirror.main platform-add ID --name NAME --base-url URL [--api-url URL] [--scheme generic]
    python -m gitmirror.main platform-set-token ID [--token TOKEN]
    python -m gitmirror.main platform-remove ID
    python -m gitmirror.main platform-validate ID
"""

from __future__ import annotations

import json as json_lib
import sys

import click

from ..models.platform import UrlScheme
from .helpers import get_services


@click.command("platform-list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def platform_list(ctx: click.Context, as_json: bool) -> None:
    """List platforms. Tokens are shown masked."""
    services = get_services(ctx)
    platforms = services.platforms.list()

    if as_json:
        click.echo(json_lib.dumps([p.public_dict() for p in platforms], indent=2))
        return

    click.echo(f"\n🌐 Platforms ({len(platforms)})\n")
    for p in platforms:
        token = p.public_dict()["authToken"] or "no token"
        tag = " [built-in]" if p.builtin else ""
        if p.has_token:
            click.secho(f"  ✓ {p.id}", fg="green", nl=False)
        else:
            click.secho(f"  ✗ {p.id}", fg="red", nl=False)
        click.echo(f" — {p.base_url} ({p.url_scheme.value}, {token}){tag}")
    click.echo()


@click.command("platform-add")
@click.argument("platform_id")
@click.option("--name", required=True)
@click.option("--base-url", required=True, help="e.g. https://git.example.com")
@click.option("--api-url", default=None, help="REST API root, used for token validation")
@click.option(
    "--scheme",
    type=click.Choice([s.value for s in UrlScheme]),
    default=UrlScheme.GENERIC.value,
    help="How the token is embedded in git URLs",
)
@click.option("--token", default=None, help="Access token (or set later)")
@click.pass_context
def platform_add(
    ctx: click.Context,
    platform_id: str,
    name: str,
    base_url: str,
    api_url: str | None,
    scheme: str,
    token: str | None,
) -> None:
    """Add a custom platform (e.g. a self-hosted GitLab)."""
    from pydantic import ValidationError

    from ..models.platform import Platform
    from ..persistence.json_store import StoreError

    services = get_services(ctx)
    try:
        platform = Platform(
            id=platform_id,
            name=name,
            base_url=base_url,
            api_url=api_url,
            url_scheme=UrlScheme(scheme),
            auth_token=token,
        )
        services.platforms.add(platform)
    except (StoreError, ValidationError) as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✓ Added platform {platform_id}", fg="green")


@click.command("platform-set-token")
@click.argument("platform_id")
@click.option(
    "--token",
    prompt=True,
    hide_input=True,
    help="Access token (prompted if omitted; empty clears it)",
)
@click.pass_context
def platform_set_token(ctx: click.Context, platform_id: str, token: str) -> None:
    """Set or rotate a platform's access token."""
    from ..persistence.json_store import NotFoundError

    services = get_services(ctx)
    try:
        platform = services.platforms.set_token(platform_id, token.strip() or None)
    except NotFoundError as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    if platform.has_token:
        click.secho(f"✓ Token set for {platform_id} ({platform.public_dict()['authToken']})", fg="green")
    else:
        click.secho(f"✓ Token cleared for {platform_id}", fg="yellow")


@click.command("platform-remove")
@click.argument("platform_id")
@click.pass_context
def platform_remove(ctx: click.Context, platform_id: str) -> None:
    """Remove a custom platform. Built-in platforms cannot be removed."""
    from ..persistence.json_store import StoreError

    services = get_services(ctx)
    in_use = [r.id for r in services.repositories.list() if r.platform_id == platform_id]
    if in_use:
        click.secho(f"✗ Platform {platform_id} is used by: {', '.join(in_use)}", fg="red")
        sys.exit(1)

    try:
        services.platforms.delete(platform_id)
    except StoreError as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✓ Removed platform {platform_id}", fg="green")


@click.command("platform-validate")
@click.argument("platform_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def platform_validate(ctx: click.Context, platform_id: str, as_json: bool) -> None:
    """Check the platform's token against its API."""
    from ..adapters.platform_api import validate_token

    services = get_services(ctx)
    platform = services.platforms.get_by_id(platform_id)
    if platform is None:
        click.secho(f"✗ Platform not found: {platform_id}", fg="red")
        sys.exit(1)

    result = validate_token(platform)

    if as_json:
        click.echo(json_lib.dumps({"id": platform_id, **result.to_dict()}, indent=2))
    elif result.valid:
        who = f" as {result.username}" if result.username else ""
        click.secho(f"✓ {platform_id}: token valid{who}", fg="green")
    else:
        click.secho(f"✗ {platform_id}: {result.error}", fg="red")

    if not result.valid:
        sys.exit(1)
