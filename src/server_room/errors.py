"""Exception hierarchy for server-room.

Every error raised by the store, the project resolver, the launcher and the
interactive prompts derives from :class:`ServerRoomError`.  Each carries a
short ``message`` describing what went wrong and a ``suggestion`` telling the
user how to fix it.  The CLI renders them as::

    DuplicateServerName: Server "api" already exists

    Try editing the existing server instead.

Errors are never retried automatically; recovery is the caller's job.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from server_room.models.server import Server

PathLike = Union[str, Path]


class ServerRoomError(Exception):
    """Base class for all actionable server-room errors."""

    code = "ServerRoomError"

    def __init__(self, message: str, suggestion: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.code}: {self.message}\n\n{self.suggestion}"
        return f"{self.code}: {self.message}"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class ParseStoreError(ServerRoomError):
    code = "ParseStore"

    def __init__(self, path: PathLike, cause: str = "") -> None:
        self.path = Path(path)
        message = f'Couldn\'t parse server store file "{self.path}"'
        if cause:
            message = f"{message}: {cause}"
        super().__init__(
            message,
            "Try fixing the file by hand or moving it aside to start with an empty store.",
        )


class WriteStoreError(ServerRoomError):
    code = "WriteStore"

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(
            f'Couldn\'t write server store file "{self.path}"',
            "Try making sure that the directory is writable.",
        )


class StringifyStoreError(ServerRoomError):
    code = "StringifyStore"

    def __init__(self, cause: str = "") -> None:
        message = "Couldn't stringify server store"
        if cause:
            message = f"{message}: {cause}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Server lookups and validation
# ---------------------------------------------------------------------------


class NonExistentServerError(ServerRoomError):
    code = "NonExistentServer"

    def __init__(self, name: str, closest: Optional[str] = None) -> None:
        self.name = name
        self.closest = closest
        if closest is not None:
            suggestion = f"Did you mean --server {closest}?"
        else:
            suggestion = "Try a different server name."
        super().__init__(f'Server "{name}" does not exist', suggestion)


class DuplicateServerNameError(ServerRoomError):
    code = "DuplicateServerName"

    def __init__(self, name: str, existing: Optional["Server"] = None) -> None:
        self.name = name
        self.existing = existing
        super().__init__(
            f'Server "{name}" already exists',
            "Try choosing a different name or editing the existing server instead."
            f"\n\n    server-room edit start-script --server {name}",
        )


class DuplicateServerDirError(ServerRoomError):
    code = "DuplicateServerDir"

    def __init__(self, directory: PathLike, existing: "Server") -> None:
        self.directory = str(directory)
        self.existing = existing
        super().__init__(
            f'Server "{existing.name}" already uses the directory "{self.directory}"',
            "Try editing the existing server instead."
            f"\n\n    server-room edit start-script --server {existing.name}",
        )


class EmptyServerNameError(ServerRoomError):
    code = "EmptyServerName"

    def __init__(self) -> None:
        super().__init__(
            "Server names cannot be empty",
            "Try entering a name with at least one visible character.",
        )


class EmptyStartCommandError(ServerRoomError):
    code = "EmptyStartCommand"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'Start command of server "{name}" cannot be empty',
            f"Try picking a script instead.\n\n    server-room edit start-script --server {name}",
        )


class InvalidServerError(ServerRoomError):
    code = "InvalidServer"

    def __init__(self, name: str, cause: str) -> None:
        self.name = name
        super().__init__(f'Server "{name}" is invalid: {cause}')


class NoServersError(ServerRoomError):
    code = "NoServers"

    def __init__(self) -> None:
        super().__init__(
            "No servers have been added yet",
            "Try adding one first.\n\n    server-room add <path>",
        )


# ---------------------------------------------------------------------------
# Launching
# ---------------------------------------------------------------------------


class RunScriptError(ServerRoomError):
    code = "RunScript"

    def __init__(self, command: str, cause: str = "") -> None:
        self.command = command
        message = f'Couldn\'t execute command "{command}"'
        if cause:
            message = f"{message}: {cause}"
        super().__init__(
            message,
            "Try making sure that the server's directory still exists.",
        )


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ReadPackageJsonError(ServerRoomError):
    code = "ReadPackageJson"

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(
            f'Could not read file "{self.path}"',
            "Try creating a new npm project in this project directory."
            f"\n\n    cd {self.path.parent}\n    npm init",
        )


class MalformedPackageJsonError(ServerRoomError):
    code = "MalformedPackageJson"

    def __init__(self, path: PathLike, cause: str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(
            f'Malformed package.json file "{self.path}": {cause}',
            'Try making sure that the "scripts" property in package.json is an '
            "object with at least one key. For example:"
            '\n\n    "scripts": {\n        "start": "node app.js"\n    }',
        )


class NonExistentScriptError(ServerRoomError):
    code = "NonExistentScript"

    def __init__(self, path: PathLike, script: str) -> None:
        self.path = Path(path)
        self.script = script
        super().__init__(
            f'Script "{script}" doesn\'t exist in "{self.path}"',
            f"Try adding the script {script} to your package.json.",
        )


class ReadServersDirError(ServerRoomError):
    code = "ReadServersDir"

    def __init__(self, path: Optional[PathLike]) -> None:
        self.path = Path(path) if path is not None else None
        where = f' "{self.path}"' if self.path is not None else ""
        super().__init__(
            f"Couldn't read servers directory{where}",
            "Try setting `servers_dir` in the configuration to the directory "
            "where your servers are, or pass the project path explicitly.",
        )


class NoNewProjectsError(ServerRoomError):
    code = "NoNewProjects"

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(
            f'Servers directory "{self.path}" only contains existing servers',
            "Try creating a new project there first.",
        )


# ---------------------------------------------------------------------------
# Configuration and prompts
# ---------------------------------------------------------------------------


class ParseConfigError(ServerRoomError):
    code = "ParseConfig"

    def __init__(self, path: Optional[PathLike], cause: str) -> None:
        self.path = Path(path) if path is not None else None
        where = f' "{self.path}"' if self.path is not None else ""
        super().__init__(
            f"Couldn't parse config{where}: {cause}",
            "Try fixing the value in the config file or environment.",
        )


class PromptAbortedError(ServerRoomError):
    code = "Prompt"

    def __init__(self) -> None:
        super().__init__("Operation was aborted", "Try again.")
