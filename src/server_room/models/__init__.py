"""Pydantic data models for servers, projects and their start scripts."""

from server_room.models.project import Project, Script
from server_room.models.server import Server

__all__ = [
    "Project",
    "Script",
    "Server",
]
