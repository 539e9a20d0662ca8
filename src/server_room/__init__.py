"""Server Room - Catalog, rank and launch local Node.js development servers."""

__version__ = "0.1.0"

from server_room.config import ServerRoomConfig

__all__ = ["ServerRoomConfig", "__version__"]
