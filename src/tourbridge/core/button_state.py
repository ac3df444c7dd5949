"""Held-state tracking for console buttons."""

import logging
from threading import Lock

from tourbridge.protocol.controls import CONTROL_TABLE, ControlTable

logger = logging.getLogger(__name__)


class ButtonStateStore:
    """
    Which buttons are currently held down, keyed by press code.

    One store exists per running server and is shared by all of that
    server's sessions. Every operation takes the lock for a single map
    read or write only; callers never hold it across socket I/O or
    event delivery.

    A code with no entry is not held. Only press codes are ever stored.
    """

    def __init__(self, table: ControlTable = CONTROL_TABLE) -> None:
        """
        Initialize an empty store.

        Args:
            table: Control table that decides which codes are press codes
        """
        self._table = table
        self._lock = Lock()
        self._held: dict[int, bool] = {}

    def set_held(self, code: int, held: bool) -> None:
        """
        Set the held state of a press code.

        Args:
            code: Press code
            held: True when the button went down, False when it came up

        Raises:
            ValueError: If code is not a press code
        """
        if not self._table.is_press_code(code):
            raise ValueError(f"Code {code} is not a press code")
        with self._lock:
            self._held[code] = held

    def is_held(self, code: int) -> bool:
        """Check a press code; unknown codes read as not held."""
        with self._lock:
            return self._held.get(code, False)

    def release_if_held(self, code: int) -> bool:
        """
        Clear a press code if it is currently held.

        Returns:
            True if the button was held and is now released
        """
        with self._lock:
            if self._held.get(code, False):
                self._held[code] = False
                return True
            return False

    def held_codes(self) -> list[int]:
        """Press codes currently held."""
        with self._lock:
            return [code for code, held in self._held.items() if held]

    def clear(self) -> None:
        """Forget all held state."""
        with self._lock:
            count = sum(1 for held in self._held.values() if held)
            self._held.clear()
        if count:
            logger.debug(f"Cleared {count} held button(s)")
