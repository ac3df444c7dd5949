"""Shared runtime state."""

from .button_state import ButtonStateStore

__all__ = ["ButtonStateStore"]
