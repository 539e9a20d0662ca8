"""File-based storage engine for the server registry."""

from server_room.storage.store import ServerStore

__all__ = ["ServerStore"]
