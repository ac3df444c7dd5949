"""Root of the tourbridge error tree.

Errors reach two audiences. Bind and config failures propagate out of
``start_server`` and the CLI, which shows ``user_message`` and the
``recovery_hint``. Accept and read failures never leave their server
thread; they are logged with ``log_line`` and end one connection at most.
``recoverable`` tells the two apart: a recoverable error leaves the bridge
usable.
"""

from typing import Optional


class TourBridgeError(Exception):
    """Every error raised by the bridge; ``str()`` gives the user-facing text."""

    def __init__(
        self,
        user_message: str,
        *,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        # OS error text, errno, offending value; falls back to the user text
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    @property
    def log_line(self) -> str:
        """Both messages on one line, for thread-side logging."""
        if self.technical_message == self.user_message:
            return self.user_message
        return f"{self.user_message}: {self.technical_message}"
