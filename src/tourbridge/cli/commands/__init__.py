"""CLI commands for tourbridge."""

from .config import config
from .controls import controls
from .decode import decode
from .listen import listen

__all__ = ["config", "controls", "decode", "listen"]
