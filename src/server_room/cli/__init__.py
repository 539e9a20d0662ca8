"""Click CLI commands for managing and running servers.

Provides the ``server-room`` CLI entry point with subcommands:
- ``server-room add``         -- Register a project as a server.
- ``server-room edit``        -- Rename a server or change its start script.
- ``server-room run``         -- Run a server.
- ``server-room remove``      -- Remove a server (alias ``rm``).
- ``server-room list``        -- List servers (alias ``ls``).
- ``server-room config``      -- Show the resolved configuration.
"""

from server_room.cli.main import add, cli, edit, list_servers, remove, run, show_config

__all__ = ["add", "cli", "edit", "list_servers", "remove", "run", "show_config"]
