"""Interactive prompts used by the CLI when an option was not supplied.

Each ``choose_*`` helper takes the value given on the command line (possibly
*None*) and only falls back to asking the user when it is missing.  Aborted
prompts (Ctrl-C, EOF) surface as :class:`PromptAbortedError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar, Union

import click

from server_room.errors import NoServersError, PromptAbortedError
from server_room.models.project import Project
from server_room.models.server import Server
from server_room.project import (
    find_new_projects,
    get_start_script,
    list_start_scripts,
    resolve,
    sort_scripts,
    start_command_for,
)
from server_room.storage.store import ServerStore

T = TypeVar("T")


def select(prompt: str, items: Sequence[T], render: Callable[[T], str] = str) -> T:
    """Show *items* as a numbered list and return the one the user picks."""
    for index, item in enumerate(items, start=1):
        click.echo(f"  {index:>2}) {render(item)}")
    try:
        choice = click.prompt(
            prompt,
            type=click.IntRange(1, len(items)),
            default=1,
        )
    except click.Abort as exc:
        raise PromptAbortedError() from exc
    return items[choice - 1]


def choose_server(store: ServerStore, server_name: Optional[str], prompt: str) -> Server:
    """Return the named server, or let the user pick one.

    The picker lists the most frequently and recently run servers first.
    """
    if server_name is not None:
        return store.get_one(server_name)

    servers = store.sorted_by_weight()
    if not servers:
        raise NoServersError()
    return select(prompt, servers)


def choose_project(
    store: ServerStore,
    path: Optional[Union[str, Path]],
    servers_dir: Optional[str],
    name: Optional[str],
    prompt: str,
) -> Project:
    """Return the project at *path*, or let the user pick an unregistered one
    from *servers_dir*.  *name* overrides the directory-derived name."""
    if path is not None:
        return resolve(path, name)

    project = select(prompt, find_new_projects(servers_dir, store))
    if name is not None:
        project = Project(name=name, directory=project.directory)
    return project


def choose_start_command(project: Project, script_name: Optional[str], prompt: str) -> str:
    """Return the npm command for the named script, or let the user pick one."""
    if script_name is not None:
        script = get_start_script(project, script_name)
    else:
        script = select(prompt, sort_scripts(list_start_scripts(project)))
    return start_command_for(script)


def choose_server_new_name(server: Server, new_name: Optional[str], prompt: str) -> str:
    if new_name is not None:
        return new_name
    try:
        return click.prompt(f"{prompt} (currently {server.name})")
    except click.Abort as exc:
        raise PromptAbortedError() from exc


def confirm(force: bool, prompt: str) -> bool:
    """Return *True* when *force* is set, otherwise ask (default: no)."""
    if force:
        return True
    try:
        return click.confirm(prompt, default=False)
    except click.Abort as exc:
        raise PromptAbortedError() from exc
