"""Launch adapter -- runs a server's start command in its directory.

The child process inherits stdin, stdout and stderr and the call blocks until
it exits.  A non-zero exit status is returned to the caller, not raised:
only the inability to start the command at all is an error.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Union

from server_room.errors import RunScriptError

logger = logging.getLogger(__name__)


def execute(command: str, cwd: Union[str, Path]) -> int:
    """Run *command* through the shell inside *cwd*.

    Parameters
    ----------
    command:
        Shell-invocable command string, e.g. ``npm run dev``.
    cwd:
        Working directory for the child process.

    Returns
    -------
    int
        The child's exit status.

    Raises
    ------
    RunScriptError
        If the process could not be started (missing directory, missing
        shell, permission problems).
    """
    logger.info("Running %r in %s", command, cwd)
    try:
        completed = subprocess.run(command, shell=True, cwd=str(cwd))
    except OSError as exc:
        logger.debug("Could not start %r in %s", command, cwd, exc_info=True)
        raise RunScriptError(command, str(exc)) from exc

    logger.debug("%r exited with status %d", command, completed.returncode)
    return completed.returncode
