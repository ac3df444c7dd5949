"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from tourbridge import __version__

from .commands import config, controls, decode, listen

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path.home() / ".tourbridge" / "logs"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    # Determine log level based on flags
    if debug:
        level = logging.DEBUG
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Override with explicit log level if provided
    if log_file:
        level = getattr(logging, log_level.upper())

    # Determine log file path
    if debug and not log_file:
        log_path = Path.cwd() / "tourbridge-debug.log"
    elif log_file:
        log_path = log_file
    else:
        DEFAULT_LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_path = DEFAULT_LOG_DIR / "tourbridge.log"

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    # Events go to stdout; with -v, log records are mirrored on stderr
    if verbose or debug:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
        root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="tourbridge")
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./tourbridge-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    TourBox Bridge - receive TourBox Elite console input over TCP.

    \b
    Examples:
      # Listen on the default port and print every event
      tourbridge listen

      # Accept the console from other machines
      tourbridge listen --host 0.0.0.0 --port 50500

      # Show the control table
      tourbridge controls

      # Decode captured bytes offline
      tourbridge decode "84 84 84 c4 22 a2"

      # Write a config file with the defaults, then change the port
      tourbridge config init
      tourbridge config set --port 50600

      # Enable debug logging
      tourbridge --debug listen
    """
    ctx.ensure_object(dict)
    ctx.obj["log_path"] = setup_logging(verbose, debug, log_file, log_level)


cli.add_command(listen)
cli.add_command(controls)
cli.add_command(decode)
cli.add_command(config)

if __name__ == "__main__":
    cli()
