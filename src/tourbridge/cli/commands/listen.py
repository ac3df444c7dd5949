"""Listen command: run a bridge and print console events."""

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Optional

import click

from tourbridge.bridge import TourBoxBridge
from tourbridge.exceptions import TourBridgeError, format_error_for_display
from tourbridge.models import BridgeConfig
from tourbridge.protocol import to_hex
from tourbridge.protocols import ConnectionInfo

logger = logging.getLogger(__name__)


def format_event(event_name: str, payload: Any) -> str:
    """One line of listen output for a bridge event."""
    if isinstance(payload, ConnectionInfo):
        return f"[{event_name}] {payload}"
    return f"{event_name} x{payload}"


@click.command(name="listen")
@click.option(
    '--port', '-p',
    type=click.IntRange(0, 65535),
    default=None,
    help='Port to listen on (default: from config, 50500)'
)
@click.option(
    '--host', '-H',
    type=str,
    default=None,
    help='Address to bind (default: from config, 127.0.0.1)'
)
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.tourbridge/config.json)'
)
@click.option(
    '--raw/--no-raw',
    default=False,
    help='Also print every received chunk as hex (default: disabled)'
)
@click.pass_context
def listen(ctx, port: Optional[int], host: Optional[str], config_path: Optional[Path], raw: bool):
    """
    Start a bridge and print every event until interrupted.

    Point the TourBox console at this machine and port, then use the
    controls. Press Ctrl+C to stop.
    """
    stop_requested = threading.Event()

    try:
        config = BridgeConfig.load_or_default(config_path)
        bridge = TourBoxBridge(config)
    except TourBridgeError as e:
        _fail(ctx, e)

    bridge.on("*", lambda name, payload: click.echo(format_event(name, payload)))
    if raw:
        bridge.raw(lambda data: click.echo(f"raw {to_hex(data)}"))

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        stop_requested.set()

    previous_handlers = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            previous_handlers[signum] = signal.signal(signum, handle_signal)
        except ValueError:
            # Not on the main thread; Ctrl+C still raises KeyboardInterrupt
            pass

    try:
        server_id = bridge.start_server(port=port, bind_address=host)
        bound_port = bridge.server_port(server_id)
        bind_address = host or config.bind_address
        click.echo(f"Listening on {bind_address}:{bound_port} (Ctrl+C to stop)")
        logger.info(f"Server {server_id} ready on {bind_address}:{bound_port}")

        _wait_for_stop(stop_requested)

    except KeyboardInterrupt:
        logger.info("Listen interrupted by user")
    except TourBridgeError as e:
        _fail(ctx, e)
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        bridge.close()

    click.echo("Stopped.", err=True)


def _wait_for_stop(stop_requested: threading.Event) -> None:
    # Short waits so Ctrl+C is handled promptly where signals are not installed
    while not stop_requested.wait(timeout=0.5):
        pass


def _fail(ctx, error: Exception) -> None:
    logger.error(f"listen failed: {error}")
    user_message, recovery_hint = format_error_for_display(error)

    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    log_path = (ctx.obj or {}).get("log_path")
    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
    sys.exit(1)
