"""TCP side of the bridge: listeners, sessions and the server registry."""

from .listener import Listener
from .registry import ServerRegistry
from .session import Session

__all__ = ["Listener", "ServerRegistry", "Session"]
