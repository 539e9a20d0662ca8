"""Project resolver -- finds Node projects on disk and reads their scripts.

Read-only helpers around ``package.json``:

- :func:`resolve` confirms that a directory is a Node project.
- :func:`list_start_scripts` / :func:`get_start_script` read its ``scripts``.
- :func:`find_new_projects` scans a servers directory for projects that are
  not registered yet.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from server_room.errors import (
    MalformedPackageJsonError,
    NoNewProjectsError,
    NonExistentScriptError,
    ReadPackageJsonError,
    ReadServersDirError,
    ServerRoomError,
)
from server_room.models.project import Project, Script

if TYPE_CHECKING:
    from server_room.storage.store import ServerStore

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"

# Scripts most likely to start a dev server; offered first in pickers.
PRIORITY_SCRIPTS = frozenset({"dev", "run", "start"})


def resolve(path: Union[str, Path], name: Optional[str] = None) -> Project:
    """Return the project rooted at *path*.

    The project is named after the directory unless *name* is given.

    Raises
    ------
    ReadPackageJsonError
        *path* has no ``package.json`` file.
    """
    directory = Path(os.path.abspath(os.path.expanduser(str(path))))
    package_json = directory / PACKAGE_JSON
    if not package_json.is_file():
        raise ReadPackageJsonError(package_json)
    if name is None:
        name = directory.name
    return Project(name=name, directory=str(directory))


def list_start_scripts(project: Project) -> list[Script]:
    """Return the scripts declared in the project's ``package.json``.

    Raises
    ------
    ReadPackageJsonError
        The file cannot be read.
    MalformedPackageJsonError
        The file is not valid JSON, or ``scripts`` is missing, not an object,
        or empty.
    """
    path = Path(project.package_json_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ReadPackageJsonError(path) from exc

    try:
        package = json.loads(content)
    except json.JSONDecodeError as exc:
        raise MalformedPackageJsonError(path, f"invalid JSON ({exc.msg})") from exc

    scripts = package.get("scripts") if isinstance(package, dict) else None
    if not isinstance(scripts, dict) or not scripts:
        raise MalformedPackageJsonError(
            path, 'property "scripts" is not an object or is empty'
        )

    result: list[Script] = []
    for script_name, command in scripts.items():
        if not isinstance(command, str):
            command = json.dumps(command)
        result.append(Script(name=script_name, command=command))
    return result


def get_start_script(project: Project, script_name: str) -> Script:
    """Return the script called *script_name*.

    Raises :class:`NonExistentScriptError` if ``package.json`` does not
    declare it.
    """
    for script in list_start_scripts(project):
        if script.name == script_name:
            return script
    raise NonExistentScriptError(project.package_json_path, script_name)


def sort_scripts(scripts: list[Script]) -> list[Script]:
    """Order scripts for display: dev/run/start first, then alphabetically."""
    return sorted(
        scripts,
        key=lambda script: (script.name not in PRIORITY_SCRIPTS, script.name),
    )


def start_command_for(script: Script) -> str:
    """Shell command that runs *script* through npm."""
    return f"npm run {script.name}"


def find_new_projects(
    servers_dir: Union[str, Path, None], store: "ServerStore"
) -> list[Project]:
    """Return unregistered projects directly inside *servers_dir*.

    A subdirectory qualifies when it holds a ``package.json`` file and
    neither its name nor its path belongs to an existing server.

    Raises
    ------
    ReadServersDirError
        *servers_dir* is not set or cannot be listed.
    NoNewProjectsError
        Every project in *servers_dir* is already registered.
    """
    if servers_dir is None:
        raise ReadServersDirError(None)

    root = Path(servers_dir).expanduser()
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        raise ReadServersDirError(root) from exc

    projects: list[Project] = []
    for entry in entries:
        if not entry.is_dir():
            continue
        try:
            project = resolve(entry)
            store.validate_new_project(project)
        except ServerRoomError as exc:
            logger.debug("Skipping %s: %s", entry, exc)
            continue
        projects.append(project)

    if not projects:
        raise NoNewProjectsError(root)
    return sorted(projects, key=lambda project: project.name)
