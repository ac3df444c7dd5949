"""Event delivery: dispatcher thread and observer fan-out."""

from .dispatcher import EventDispatcher
from .observer import ObserverManager

__all__ = ["EventDispatcher", "ObserverManager"]
