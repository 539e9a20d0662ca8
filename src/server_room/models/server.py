"""The Server model -- the durable record for one managed project.

A server associates a project directory with the shell command that starts
it, plus a frecency score used to rank servers in interactive pickers.
Servers are immutable: the store validates every updated record into a new
instance and replaces its committed mapping wholesale.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from server_room.launcher import execute

Launcher = Callable[[str, Path], int]


class Server(BaseModel):
    """One tracked project.

    Attributes
    ----------
    name:
        Unique, case-sensitive identifier chosen by the user.  Also the
        default display and sort key.
    directory:
        Absolute path to the project root.  Unique within a store.
    start_command:
        Shell command resolved when the server was added or edited, e.g.
        ``npm run dev``.  Not re-validated before each run.
    frecency:
        Blended recency/frequency score (see :mod:`server_room.frecency`).
        ``0.0`` means the server has never been run.  NaN and infinities are
        rejected on construction so they can never reach the store file.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    directory: str = Field(..., min_length=1)
    start_command: str = Field(..., min_length=1)
    frecency: float = Field(default=0.0, allow_inf_nan=False)

    @field_validator("directory")
    @classmethod
    def normalise_directory(cls, value: str) -> str:
        """Store directories as absolute, normalised paths so that two
        spellings of the same path compare equal."""
        return os.path.abspath(os.path.expanduser(value))

    def get_weight(self) -> float:
        """Likelihood that this server is wanted next; higher is more likely."""
        return self.frecency

    def start(self, directory: Path, launcher: Optional[Launcher] = None) -> int:
        """Run :attr:`start_command` in *directory* and return its exit status.

        Raises :class:`~server_room.errors.RunScriptError` if the command
        could not be executed at all.
        """
        run = launcher if launcher is not None else execute
        return run(self.start_command, directory)

    def __str__(self) -> str:
        return self.name
