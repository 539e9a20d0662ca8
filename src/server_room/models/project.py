"""Models for candidate projects on the filesystem and their npm scripts.

A :class:`Project` is a directory that has been confirmed to hold a
``package.json`` file but has not necessarily been registered as a server.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Script(BaseModel):
    """A single entry of the ``scripts`` object in ``package.json``."""

    model_config = ConfigDict(frozen=True)

    name: str
    command: str = ""

    def __str__(self) -> str:
        return f"{self.name}: {self.command}"


class Project(BaseModel):
    """A candidate project: the server name it would get and its directory."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Name the project will be registered under.",
    )
    directory: str = Field(
        ...,
        min_length=1,
        description="Absolute path to the project root.",
    )

    @field_validator("directory")
    @classmethod
    def normalise_directory(cls, value: str) -> str:
        return os.path.abspath(os.path.expanduser(value))

    @property
    def package_json_path(self) -> str:
        return os.path.join(self.directory, "package.json")

    def __str__(self) -> str:
        return self.name
