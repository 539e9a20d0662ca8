"""ServerStore -- the durable, file-backed registry of servers.

Owns the name -> :class:`Server` mapping, its JSON representation on disk,
and every operation that changes it.  Each mutating method follows the same
transaction:

1. validate against the committed state,
2. build a new mapping (servers are immutable, so this is a shallow copy),
3. write the new mapping to disk atomically,
4. swap the committed mapping for the new one.

A validation error stops at step 1 and a write error at step 3, so a failure
never leaves a half-applied change in memory or on disk.

Typical usage::

    store = ServerStore.load("/home/me/.local/share/server-room/servers.json")
    store.add_server(project, "npm run dev")
    store.start_server("api")
    store.remove_server("old-api")

The persisted document lists servers in lexicographic name order so that two
stores holding the same servers produce byte-identical files.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from server_room.errors import (
    DuplicateServerDirError,
    DuplicateServerNameError,
    EmptyServerNameError,
    EmptyStartCommandError,
    InvalidServerError,
    NonExistentServerError,
    ParseStoreError,
    StringifyStoreError,
    WriteStoreError,
)
from server_room.frecency import Clock, rank_key, system_clock, update_frecency
from server_room.launcher import execute
from server_room.matcher import NameMatcher
from server_room.models.project import Project
from server_room.models.server import Launcher, Server

logger = logging.getLogger(__name__)


class StoreDocument(BaseModel):
    """On-disk shape of the store: a flat list of server records."""

    servers: list[Server] = Field(default_factory=list)


class ServerStore:
    """File-backed collection of :class:`Server` records.

    Parameters
    ----------
    path:
        Location of the backing JSON file.  It does not need to exist yet;
        parent directories are created on the first write.
    servers:
        Initial committed servers.  Normally supplied by :meth:`load`.
    clock:
        Zero-argument callable returning microseconds since the epoch.
        Used for frecency updates.  Defaults to the wall clock.
    launcher:
        Callable ``(command, directory) -> exit status`` used by
        :meth:`start_server`.  Defaults to :func:`server_room.launcher.execute`.
    """

    def __init__(
        self,
        path: Union[str, Path],
        servers: Optional[dict[str, Server]] = None,
        clock: Optional[Clock] = None,
        launcher: Optional[Launcher] = None,
    ) -> None:
        self._path = Path(path).expanduser().resolve()
        self._servers: dict[str, Server] = dict(servers or {})
        self._clock = clock or system_clock
        self._launcher = launcher or execute

    # ------------------------------------------------------------------
    # Loading and flushing
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        clock: Optional[Clock] = None,
        launcher: Optional[Launcher] = None,
    ) -> "ServerStore":
        """Load the store from *path*.

        A missing file yields an empty store.  A file that cannot be read, is
        not valid JSON, does not match the record schema, or lists the same
        name or directory twice raises :class:`ParseStoreError`; malformed
        data is never repaired silently.
        """
        store_path = Path(path).expanduser().resolve()
        if not store_path.exists():
            logger.info("No server store at %s. Starting with an empty store.", store_path)
            return cls(store_path, clock=clock, launcher=launcher)

        try:
            raw = store_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ParseStoreError(store_path, str(exc)) from exc

        try:
            document = StoreDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise ParseStoreError(
                store_path, f"{exc.error_count()} validation error(s)"
            ) from exc

        servers: dict[str, Server] = {}
        directories: set[str] = set()
        for server in document.servers:
            if server.name in servers:
                raise ParseStoreError(store_path, f'duplicate server name "{server.name}"')
            if server.directory in directories:
                raise ParseStoreError(
                    store_path, f'duplicate server directory "{server.directory}"'
                )
            servers[server.name] = server
            directories.add(server.directory)

        logger.debug("Loaded %d server(s) from %s", len(servers), store_path)
        return cls(store_path, servers, clock=clock, launcher=launcher)

    def flush(self) -> Path:
        """Write the committed servers to the backing file.

        Returns
        -------
        Path
            The path that was written.
        """
        self._write(self._servers)
        return self._path

    def dumps(self, servers: Optional[dict[str, Server]] = None) -> str:
        """Serialize *servers* (default: the committed ones) to the file format.

        Raises :class:`StringifyStoreError` if the servers cannot be
        represented as strict JSON.
        """
        if servers is None:
            servers = self._servers
        ordered = sorted(servers.values(), key=lambda server: server.name)
        try:
            data = {"servers": [server.model_dump(mode="json") for server in ordered]}
            return json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False) + "\n"
        except (TypeError, ValueError) as exc:
            raise StringifyStoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_new_project(self, candidate: Project) -> None:
        """Check that *candidate* can be registered.

        Raises
        ------
        EmptyServerNameError
            The candidate's name is empty or whitespace.
        DuplicateServerNameError
            A server already uses the candidate's name.
        DuplicateServerDirError
            A server with a different name already uses the candidate's
            directory.
        """
        if not candidate.name.strip():
            raise EmptyServerNameError()

        existing = self._servers.get(candidate.name)
        if existing is not None:
            raise DuplicateServerNameError(candidate.name, existing)

        for server in self._servers.values():
            if server.directory == candidate.directory:
                raise DuplicateServerDirError(candidate.directory, server)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_server(self, candidate: Project, start_command: str) -> Server:
        """Register *candidate* as a new server with zero frecency."""
        self.validate_new_project(candidate)
        if not start_command.strip():
            raise EmptyStartCommandError(candidate.name)

        server = self._build(
            candidate.name,
            {
                "name": candidate.name,
                "directory": candidate.directory,
                "start_command": start_command,
            },
        )
        servers = dict(self._servers)
        servers[server.name] = server
        self._commit(servers)
        logger.info("Added server %s (%s)", server.name, server.directory)
        return server

    def set_server_name(self, old_name: str, new_name: str) -> Server:
        """Rename a server.

        Raises
        ------
        EmptyServerNameError
            *new_name* is empty or whitespace.
        NonExistentServerError
            No server is called *old_name*.
        DuplicateServerNameError
            A different server already uses *new_name*.
        """
        if not new_name or not new_name.strip():
            raise EmptyServerNameError()

        server = self._require(old_name)
        if new_name != old_name and new_name in self._servers:
            raise DuplicateServerNameError(new_name, self._servers[new_name])

        renamed = self._derive(server, name=new_name)
        servers = dict(self._servers)
        del servers[old_name]
        servers[new_name] = renamed
        self._commit(servers)
        logger.info("Renamed server %s to %s", old_name, new_name)
        return renamed

    def set_server_start_command(self, name: str, start_command: str) -> Server:
        """Replace the start command of server *name*.

        Raises
        ------
        NonExistentServerError
            No server is called *name*.
        EmptyStartCommandError
            *start_command* is empty or whitespace.
        """
        server = self._require(name)
        if not start_command.strip():
            raise EmptyStartCommandError(name)
        updated = self._derive(server, start_command=start_command)
        servers = dict(self._servers)
        servers[name] = updated
        self._commit(servers)
        logger.info("Set start command of %s to %r", name, start_command)
        return updated

    def start_server(self, name: str) -> int:
        """Record a run of server *name*, then launch it.

        The frecency update is persisted before the launch and is kept even
        if the launch fails: an attempted run still counts as a use.

        Returns
        -------
        int
            Exit status of the start command.

        Raises
        ------
        NonExistentServerError
            No server is called *name*.
        RunScriptError
            The start command could not be executed.
        """
        server = self._require(name)
        frecency = update_frecency(server.frecency, self._clock())
        updated = self._derive(server, frecency=frecency)
        servers = dict(self._servers)
        servers[name] = updated
        self._commit(servers)
        logger.debug("Frecency of %s is now %f", name, frecency)

        return updated.start(self.resolve_directory(updated), self._launcher)

    def remove_server(self, name: str) -> bool:
        """Remove server *name* if present.

        Removing an unknown name is not an error.

        Returns
        -------
        bool
            *True* if a server was removed.
        """
        servers = dict(self._servers)
        removed = servers.pop(name, None)
        self._commit(servers)
        if removed is None:
            logger.debug("Server %s does not exist, nothing to remove.", name)
            return False
        logger.info("Removed server %s", name)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_one(self, name: str) -> Server:
        """Return server *name*.

        Raises :class:`NonExistentServerError` carrying the closest known
        name as a suggestion when there is no exact match.
        """
        return self._require(name)

    def get_all(self) -> list[Server]:
        """Return every server.  The order is unspecified."""
        return list(self._servers.values())

    def has_server(self, name: str) -> bool:
        return name in self._servers

    def sorted_by_weight(self) -> list[Server]:
        """Return every server, most likely to be wanted next first."""
        return sorted(self._servers.values(), key=rank_key)

    def get_closest_server_name(self, query: str) -> Optional[str]:
        """Return the known server name most similar to *query*.

        Returns *None* only when the store is empty.
        """
        return NameMatcher(self._servers).closest(query)

    def resolve_directory(self, server: Server) -> Path:
        """Return the directory *server*'s start command runs in."""
        return Path(server.directory)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        """The resolved location of the backing file."""
        return self._path

    def __contains__(self, name: object) -> bool:
        return name in self._servers

    def __iter__(self) -> Iterator[Server]:
        return iter(list(self._servers.values()))

    def __len__(self) -> int:
        return len(self._servers)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require(self, name: str) -> Server:
        server = self._servers.get(name)
        if server is None:
            raise NonExistentServerError(name, self.get_closest_server_name(name))
        return server

    @staticmethod
    def _build(name: str, data: dict) -> Server:
        """Validate *data* into a :class:`Server` so that everything committed
        can be loaded back."""
        try:
            return Server.model_validate(data)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise InvalidServerError(name, f"{field}: {error['msg']}") from exc

    def _derive(self, server: Server, **changes: object) -> Server:
        return self._build(server.name, {**server.model_dump(), **changes})

    def _commit(self, servers: dict[str, Server]) -> None:
        """Persist *servers*, then make them the committed state."""
        self._write(servers)
        self._servers = servers

    def _write(self, servers: dict[str, Server]) -> None:
        payload = self.dumps(servers)
        try:
            self._atomic_write(self._path, payload)
        except OSError as exc:
            raise WriteStoreError(self._path) from exc
        logger.debug("Wrote %d server(s) to %s", len(servers), self._path)

    @staticmethod
    def _atomic_write(target: Path, payload: str) -> None:
        """Write *payload* to *target* via a temp file and an atomic rename.

        The temp file lives in the same directory as *target* so that
        ``os.replace`` stays on one filesystem.  If anything fails before the
        rename, the temp file is removed and *target* is left untouched.
        """
        target.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(target.parent),
                prefix=".tmp_",
                suffix=".json",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fd = None  # os.fdopen takes ownership of the fd
                fp.write(payload)
                fp.flush()
                os.fsync(fp.fileno())

            os.replace(tmp_path, str(target))
            tmp_path = None

        except BaseException:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise
