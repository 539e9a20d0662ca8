"""Configuration and settings module for server-room.

Provides the :class:`ServerRoomConfig` class which centralises all
configuration.  Configuration is resolved in priority order:

1. **Environment variables** (highest priority) -- ``SERVER_ROOM_*``
2. **Config file** -- ``$XDG_CONFIG_HOME/server-room/config.json``
3. **Defaults** (lowest priority)

Typical usage::

    config = ServerRoomConfig.load()                               # default locations
    config = ServerRoomConfig.load(config_path="/tmp/config.json") # explicit file
    config = ServerRoomConfig(store_path="/tmp/servers.json")      # programmatic

    print(config.store_path)    # resolved absolute path to servers.json
    print(config.servers_dir)   # directory scanned by ``server-room add``
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from server_room.errors import ParseConfigError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

APP_NAME = "server-room"

CONFIG_FILE_NAME = "config.json"

STORE_FILE_NAME = "servers.json"

# All config keys can be overridden by ``SERVER_ROOM_<UPPER_KEY>``.
ENV_PREFIX = "SERVER_ROOM_"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/server-room``, falling back to ``~/.config``."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def default_data_dir() -> Path:
    """``$XDG_DATA_HOME/server-room``, falling back to ``~/.local/share``."""
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ServerRoomConfig(BaseModel):
    """Centralised configuration for server-room.

    Attributes
    ----------
    store_path:
        Absolute path to the server store file.  Defaults to
        ``<data dir>/servers.json``.
    servers_dir:
        Directory whose subdirectories are offered as new projects by
        ``server-room add`` when no path is given.  *None* disables scanning.
    log_level:
        Python logging level name.  One of ``DEBUG``, ``INFO``, ``WARNING``,
        ``ERROR``, ``CRITICAL``.
    """

    store_path: Optional[str] = Field(
        default=None,
        description="Path to the servers.json store file.",
    )
    servers_dir: Optional[str] = Field(
        default=None,
        description="Directory containing the projects to pick from.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL.",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def resolve_paths(self) -> "ServerRoomConfig":
        """Expand ``~`` and make ``store_path`` and ``servers_dir`` absolute."""
        if self.store_path is not None:
            self.store_path = str(Path(self.store_path).expanduser().resolve())
        else:
            self.store_path = str(default_data_dir() / STORE_FILE_NAME)

        if self.servers_dir is not None:
            self.servers_dir = str(Path(self.servers_dir).expanduser().resolve())

        return self

    @model_validator(mode="after")
    def validate_log_level(self) -> "ServerRoomConfig":
        """Normalise and validate the log level string."""
        normalised = self.log_level.upper().strip()
        if normalised not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}."
            )
        self.log_level = normalised
        return self

    # ------------------------------------------------------------------
    # Factory: load from file + environment
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        **overrides: Any,
    ) -> "ServerRoomConfig":
        """Load configuration with full resolution: file -> env -> defaults.

        Parameters
        ----------
        config_path:
            Explicit path to a ``config.json`` file.  When *None*, the
            default config directory is used.
        overrides:
            Values that take precedence over everything else (command-line
            options).  *None* values are ignored.

        Raises
        ------
        ParseConfigError
            A resolved value fails validation.
        """
        path = _config_file_path(config_path)

        merged: dict = {}
        merged.update(_load_config_file(path))
        merged.update(_load_env_overrides())
        merged.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return cls.model_validate(merged)
        except ValidationError as exc:
            first = exc.errors()[0]
            raise ParseConfigError(path, first.get("msg", str(exc))) from exc

    # ------------------------------------------------------------------
    # Persistence: save config to disk
    # ------------------------------------------------------------------

    def save(self, config_path: Optional[str] = None) -> Path:
        """Save the user-facing fields to a JSON file and return its path."""
        target = _config_file_path(config_path)
        target.parent.mkdir(parents=True, exist_ok=True)

        data: dict = {"log_level": self.log_level}
        if self.servers_dir is not None:
            data["servers_dir"] = self.servers_dir
        # Only include store_path if it is not the derived default.
        if self.store_path != str(default_data_dir() / STORE_FILE_NAME):
            data["store_path"] = self.store_path

        with open(target, "w", encoding="utf-8") as fp:
            json.dump(data, fp, indent=2, ensure_ascii=False)
            fp.write("\n")

        logger.info("Saved configuration to %s", target)
        return target

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Apply the configured log level to the ``server_room`` logger.

        Idempotent: the handler is only attached once.
        """
        pkg_logger = logging.getLogger("server_room")
        pkg_logger.setLevel(self.log_level)

        if not pkg_logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(self.log_level)
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)
        else:
            for handler in pkg_logger.handlers:
                handler.setLevel(self.log_level)

    def to_dict(self) -> dict:
        """Return all configuration values as a plain dictionary."""
        return self.model_dump()


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _config_file_path(config_path: Optional[str]) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser().resolve()
    return default_config_dir() / CONFIG_FILE_NAME


def _load_config_file(path: Path) -> dict:
    """Read a ``config.json`` file and return its contents as a dict.

    Returns an empty dict if the file does not exist or is malformed.
    """
    if not path.is_file():
        logger.debug("No config file at %s. Using defaults.", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
        if not isinstance(data, dict):
            logger.warning(
                "Config file %s does not contain a JSON object. Ignoring.",
                path,
            )
            return {}
        logger.info("Loaded configuration from %s", path)
        return data
    except json.JSONDecodeError:
        logger.warning(
            "Config file %s contains invalid JSON. Ignoring.",
            path,
            exc_info=True,
        )
        return {}
    except OSError:
        logger.warning(
            "Could not read config file %s. Ignoring.",
            path,
            exc_info=True,
        )
        return {}


def _load_env_overrides() -> dict:
    """Read ``SERVER_ROOM_*`` environment variables and return overrides.

    - ``SERVER_ROOM_STORE_PATH`` -- override store_path
    - ``SERVER_ROOM_SERVERS_DIR`` -- override servers_dir
    - ``SERVER_ROOM_LOG_LEVEL`` -- override log_level
    """
    overrides: dict = {}

    for field_name in ("store_path", "servers_dir", "log_level"):
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value:
            overrides[field_name] = value

    if overrides:
        logger.info(
            "Environment overrides applied: %s",
            ", ".join(overrides.keys()),
        )

    return overrides
