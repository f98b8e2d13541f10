"""CLI commands for ProManage."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from promanage.config import load_config
from promanage.descfile import read_desc_file
from promanage.errors import NoStorageLocation, NotFound, ParseFailure
from promanage.models.git import GitCredentials, GitProvider
from promanage.service import ProManage

console = Console()

PROVIDER_CHOICE = click.Choice([p.value for p in GitProvider])


def credential_options(func):
    """Shared provider credential options."""
    func = click.option("--token", default=None, envvar="PROMANAGE_GIT_TOKEN", help="Access token")(func)
    func = click.option("--password", default=None, envvar="PROMANAGE_GIT_PASSWORD", help="Password")(func)
    func = click.option("--username", "-u", default=None, help="Username")(func)
    func = click.option("--base-url", default=None, help="Instance URL (gitea, self-hosted gitlab)")(func)
    func = click.option("--provider", "-p", type=PROVIDER_CHOICE, default="github", help="Git provider")(func)
    return func


def _credentials(
    provider: str, base_url: str | None, username: str | None, password: str | None, token: str | None
) -> GitCredentials:
    return GitCredentials(
        provider=GitProvider(provider),
        base_url=base_url,
        username=username,
        password=password,
        token=token,
    )


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path),
              help="YAML configuration file")
@click.option("--data-dir", default=None, help="Data directory (overrides config)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, data_dir: str | None, verbose: bool) -> None:
    """ProManage - project tracking backend CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    config = load_config(config_path)
    if data_dir:
        config = config.model_copy(update={"data_dir": Path(data_dir)})
    ctx.ensure_object(dict)
    ctx.obj["app"] = ProManage(config)


@main.command()
@credential_options
@click.pass_context
def verify(
    ctx: click.Context,
    provider: str,
    base_url: str | None,
    username: str | None,
    password: str | None,
    token: str | None,
) -> None:
    """Check Git provider credentials."""
    app: ProManage = ctx.obj["app"]
    creds = _credentials(provider, base_url, username, password, token)

    with console.status(f"Verifying {provider} credentials..."):
        result = asyncio.run(app.verify(creds))

    if result.ok:
        console.print(f"[green]{provider}: credentials valid (HTTP {result.status})[/green]")
    else:
        console.print(f"[red]{provider}: could not verify (HTTP {result.status})[/red]")
        ctx.exit(1)


@main.command()
@click.argument("repo_url")
@credential_options
@click.pass_context
def readme(
    ctx: click.Context,
    repo_url: str,
    provider: str,
    base_url: str | None,
    username: str | None,
    password: str | None,
    token: str | None,
) -> None:
    """Print the first line of a repository README."""
    app: ProManage = ctx.obj["app"]
    creds = _credentials(provider, base_url, username, password, token)

    with console.status("Fetching README..."):
        line = asyncio.run(app.fetch_readme(creds, repo_url))

    if line is None:
        console.print("[red]Could not fetch README[/red]")
        ctx.exit(1)
    console.print(line)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def desc(ctx: click.Context, path: Path) -> None:
    """Show the entries of a desc.txt file."""
    try:
        parsed = read_desc_file(path)
    except (OSError, ParseFailure) as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)
        return

    table = Table(title=str(path))
    table.add_column("Key", style="cyan")
    table.add_column("Description")

    for key, value in parsed.entries.items():
        table.add_row(key, value)

    console.print(table)
    if parsed.main is None:
        console.print("[dim]No main description[/dim]")


@main.command()
@click.argument("project_id")
@click.option("--user", "user_id", required=True, help="Owner user id")
@click.pass_context
def refresh(ctx: click.Context, project_id: str, user_id: str) -> None:
    """Rescan a project's photos/videos/models folders."""
    app: ProManage = ctx.obj["app"]

    try:
        with console.status("Scanning media folders..."):
            project = asyncio.run(app.refresh_project(user_id, project_id))
    except (NotFound, NoStorageLocation) as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)
        return

    table = Table(title=f"{project.name}: {project.description}")
    table.add_column("Type", style="cyan")
    table.add_column("File")
    table.add_column("Description", style="green")

    for item in project.media:
        table.add_row(item.type.value, Path(item.uri).name, item.description)

    console.print(table)
    console.print(f"[dim]{len(project.media)} media items[/dim]")


@main.command()
@click.option("--user", "user_id", required=True, help="Owner user id")
@click.pass_context
def projects(ctx: click.Context, user_id: str) -> None:
    """List a user's projects."""
    app: ProManage = ctx.obj["app"]
    records = asyncio.run(app.list_projects(user_id))

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Storage")
    table.add_column("Media", justify="right", style="green")

    for p in records:
        table.add_row(p.id, p.name, p.storage_location or "-", str(len(p.media)))

    console.print(table)


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", default=8000, help="Port to bind")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the API server."""
    import uvicorn

    from promanage.api import create_app

    app: ProManage = ctx.obj["app"]

    console.print(f"[green]Starting server at http://{host}:{port}{app.config.api_prefix}[/green]")
    uvicorn.run(create_app(app=app), host=host, port=port)


if __name__ == "__main__":
    main()
