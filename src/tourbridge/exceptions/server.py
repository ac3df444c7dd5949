"""Server and session exceptions.

This module defines exceptions raised by the TCP side of the bridge:
- ServerError: Base class for listener errors
- BindError: The listening socket could not be bound or put into listen mode
- AcceptError: A single accept() call failed (transient)
- SessionError: Base class for per-connection failures
- ReadError / PeerClosedError: End one session, never the listener
"""

from typing import Optional

from .base import TourBridgeError


class ServerError(TourBridgeError):
    """Listener-level failure."""
    pass


class BindError(ServerError):
    """Listening socket could not be created, bound or put into listen mode."""

    def __init__(
        self,
        host: str,
        port: int,
        original_error: Optional[str] = None,
        user_message: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        """
        Initialize bind error.

        Args:
            host: Address the server tried to bind to
            port: Port the server tried to bind to
            original_error: Low-level error message from the socket layer
            user_message: Override for the default user message
            recovery_hint: Override for the default recovery hint
        """
        technical = f"Failed to bind {host}:{port}"
        if original_error:
            technical += f" ({original_error})"

        super().__init__(
            user_message=user_message or f"Could not start server on {host}:{port}",
            technical_message=technical,
            recoverable=False,
            recovery_hint=recovery_hint or "Check the bind address and port in your configuration",
        )
        self.host = host
        self.port = port
        self.original_error = original_error


class AddressInUseError(BindError):
    """Another process already listens on the requested address."""

    def __init__(self, host: str, port: int, original_error: Optional[str] = None):
        super().__init__(
            host,
            port,
            original_error,
            user_message=f"Port {port} on {host} is already in use",
            recovery_hint=(
                "Stop the other TourBox bridge (or the vendor console software) "
                f"listening on port {port}, or start with --port to pick another port"
            ),
        )


class BindPermissionError(BindError):
    """Insufficient privilege to bind the requested port."""

    def __init__(self, host: str, port: int, original_error: Optional[str] = None):
        super().__init__(
            host,
            port,
            original_error,
            user_message=f"Permission denied binding {host}:{port}",
            recovery_hint="Ports below 1024 need elevated privileges; use a higher port",
        )


class InvalidBindAddressError(BindError):
    """The bind address is not a usable local IPv4 address."""

    def __init__(self, host: str, port: int, original_error: Optional[str] = None):
        super().__init__(
            host,
            port,
            original_error,
            user_message=f"Cannot bind to address '{host}'",
            recovery_hint="Use 127.0.0.1 for local-only access or 0.0.0.0 for all interfaces",
        )


class AcceptError(ServerError):
    """A single accept() call failed while the listener was running."""

    def __init__(self, server_id: int, original_error: str):
        super().__init__(
            user_message="Failed to accept an incoming connection",
            technical_message=f"accept() failed on server {server_id}: {original_error}",
            recoverable=True,
        )
        self.server_id = server_id
        self.original_error = original_error


class SessionError(TourBridgeError):
    """Failure confined to a single console connection."""

    def __init__(self, peer: str, user_message: str, technical_message: Optional[str] = None):
        super().__init__(
            user_message=user_message,
            technical_message=technical_message,
            recoverable=True,
        )
        self.peer = peer


class ReadError(SessionError):
    """recv() on a console connection failed."""

    def __init__(self, peer: str, original_error: str):
        super().__init__(
            peer,
            user_message=f"Lost connection to console at {peer}",
            technical_message=f"recv() from {peer} failed: {original_error}",
        )
        self.original_error = original_error


class PeerClosedError(SessionError):
    """The console closed its end of the connection."""

    def __init__(self, peer: str):
        super().__init__(peer, user_message=f"Console at {peer} disconnected")
