"""Main Click CLI entry point for the ``server-room`` command.

Entry point registered in pyproject.toml::

    [project.scripts]
    server-room = "server_room.cli.main:cli"

Usage examples::

    server-room add ~/dev/api --start-script dev
    server-room run --server api
    server-room edit name --server api --name backend
    server-room edit start-script --server backend
    server-room rm --server backend --force
    server-room ls
    server-room config --json-output

Every option that identifies a server, project or script can be left out;
the user is then prompted interactively.
"""

from __future__ import annotations

import json
from typing import Optional

import click

from server_room import __version__
from server_room.cli.prompt import (
    choose_project,
    choose_server,
    choose_server_new_name,
    choose_start_command,
    confirm,
)
from server_room.config import ServerRoomConfig
from server_room.errors import ServerRoomError
from server_room.matcher import NameMatcher
from server_room.models.project import Project
from server_room.storage.store import ServerStore

# Minimum similarity for suggesting a subcommand in place of a mistyped one.
COMMAND_SUGGESTION_THRESHOLD = 0.5


class ServerRoomGroup(click.Group):
    """Click group with command aliases, "did you mean" suggestions for
    unknown commands, and uniform rendering of :class:`ServerRoomError`."""

    aliases = {"rm": "remove", "ls": "list"}

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        cmd_name = click.utils.make_str(args[0])
        if (
            self.get_command(ctx, cmd_name) is None
            and not cmd_name.startswith("-")
            and not ctx.resilient_parsing
        ):
            matcher = NameMatcher(self.list_commands(ctx))
            suggestion = matcher.closest(cmd_name, COMMAND_SUGGESTION_THRESHOLD)
            if suggestion is not None:
                ctx.fail(
                    f"Invalid command '{cmd_name}'. "
                    f"Did you mean `server-room {suggestion}`?"
                )
        return super().resolve_command(ctx, args)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except ServerRoomError as exc:
            click.secho(str(exc), fg="red", err=True)
            ctx.exit(1)


@click.group(cls=ServerRoomGroup)
@click.version_option(version=__version__, prog_name="server-room")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.json. Defaults to ~/.config/server-room/config.json.",
)
@click.option(
    "--store-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the servers.json store. Overrides the configuration.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level. Overrides the configuration.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    store_path: Optional[str],
    log_level: Optional[str],
) -> None:
    """Server Room -- Catalog and run your local dev servers."""
    ctx.ensure_object(dict)
    config = ServerRoomConfig.load(
        config_path,
        store_path=store_path,
        log_level=log_level,
    )
    config.configure_logging()
    ctx.obj["config"] = config


def _config(ctx: click.Context) -> ServerRoomConfig:
    return ctx.obj["config"]


def _store(ctx: click.Context) -> ServerStore:
    return ServerStore.load(_config(ctx).store_path)


def _exit_status(status: int) -> int:
    """Map a child's return code to a shell-style exit status.

    A child killed by signal N reports -N; shells report 128 + N.
    """
    if status < 0:
        return 128 - status
    return status


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.command("config")
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output the configuration as JSON.",
)
@click.pass_context
def show_config(ctx: click.Context, output_json: bool) -> None:
    """Display the resolved configuration."""
    data = _config(ctx).to_dict()
    if output_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.secho("Server Room -- Configuration", fg="cyan", bold=True)
    click.secho("=" * 30, fg="cyan")
    click.echo(f"  Store path:  {data['store_path']}")
    click.echo(f"  Servers dir: {data['servers_dir'] or '(not set)'}")
    click.echo(f"  Log level:   {data['log_level']}")


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("-n", "--name", default=None, help="Name of the new server. Defaults to the directory name.")
@click.option("-s", "--start-script", default=None, help="package.json script that starts the server.")
@click.pass_context
def add(
    ctx: click.Context,
    path: Optional[str],
    name: Optional[str],
    start_script: Optional[str],
) -> None:
    """Add a new server.

    PATH is the project directory.  When omitted, pick one of the
    unregistered projects in the configured servers directory.
    """
    store = _store(ctx)
    project = choose_project(
        store, path, _config(ctx).servers_dir, name, "Pick a project"
    )
    store.validate_new_project(project)
    start_command = choose_start_command(project, start_script, "Pick a start script")
    server = store.add_server(project, start_command)
    click.echo(f"Added server {server.name} ({server.start_command})")


# ---------------------------------------------------------------------------
# edit
# ---------------------------------------------------------------------------


@cli.group()
def edit() -> None:
    """Change a server's definition."""


@edit.command("name")
@click.option("-s", "--server", "server_name", default=None, help="Server to edit.")
@click.option("--name", "new_name", default=None, help="The server's new name.")
@click.option("-f", "--force", is_flag=True, default=False, help="Don't prompt for confirmation.")
@click.pass_context
def edit_name(
    ctx: click.Context,
    server_name: Optional[str],
    new_name: Optional[str],
    force: bool,
) -> None:
    """Rename a server."""
    store = _store(ctx)
    server = choose_server(store, server_name, "Pick a server to rename")
    new_name = choose_server_new_name(server, new_name, "New name")
    if not confirm(force, f"Rename {server.name} to {new_name}?"):
        click.echo("Cancelled.")
        return
    store.set_server_name(server.name, new_name)
    click.echo(f"Renamed server {server.name} to {new_name}")


@edit.command("start-script")
@click.option("-s", "--server", "server_name", default=None, help="Server to edit.")
@click.option("--start-script", default=None, help="The server's new start script.")
@click.option("-f", "--force", is_flag=True, default=False, help="Don't prompt for confirmation.")
@click.pass_context
def edit_start_script(
    ctx: click.Context,
    server_name: Optional[str],
    start_script: Optional[str],
    force: bool,
) -> None:
    """Change a server's start script."""
    store = _store(ctx)
    server = choose_server(store, server_name, "Pick a server to edit")
    project = Project(name=server.name, directory=server.directory)
    start_command = choose_start_command(project, start_script, "Pick a new start script")
    if not confirm(force, f"Change start command of {server.name} to {start_command!r}?"):
        click.echo("Cancelled.")
        return
    store.set_server_start_command(server.name, start_command)
    click.echo(f"Server {server.name} now starts with {start_command}")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command()
@click.option("-s", "--server", "server_name", default=None, help="Server to run.")
@click.pass_context
def run(ctx: click.Context, server_name: Optional[str]) -> None:
    """Run a server.

    Exits with the start command's exit status.
    """
    store = _store(ctx)
    server = choose_server(store, server_name, "Pick a server to run")
    click.secho(f"Starting {server.name}: {server.start_command}", fg="green", err=True)
    status = _exit_status(store.start_server(server.name))
    if status != 0:
        ctx.exit(status)


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


@cli.command()
@click.option("-s", "--server", "server_name", default=None, help="Server to remove.")
@click.option("-f", "--force", is_flag=True, default=False, help="Don't prompt for confirmation.")
@click.pass_context
def remove(ctx: click.Context, server_name: Optional[str], force: bool) -> None:
    """Remove a server (alias: rm)."""
    store = _store(ctx)
    server = choose_server(store, server_name, "Pick a server to remove")
    if not confirm(force, f"Remove server {server.name}?"):
        click.echo("Cancelled.")
        return
    store.remove_server(server.name)
    click.echo(f"Removed server {server.name}")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command("list")
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output servers as JSON.",
)
@click.pass_context
def list_servers(ctx: click.Context, output_json: bool) -> None:
    """Display all servers (alias: ls)."""
    servers = sorted(_store(ctx).get_all(), key=lambda server: server.name)

    if output_json:
        click.echo(json.dumps([server.model_dump(mode="json") for server in servers], indent=2))
        return

    if not servers:
        click.secho("No servers have been added yet.", fg="yellow")
        return

    width = max(len(server.name) for server in servers)
    for server in servers:
        click.echo(f"{server.name:<{width}}  {server.start_command:<20}  {server.directory}")


if __name__ == "__main__":
    cli()
