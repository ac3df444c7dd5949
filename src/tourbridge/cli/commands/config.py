"""Config commands: create, inspect and change the settings file."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from tourbridge.exceptions import TourBridgeError, format_error_for_display, wrap_pydantic_error
from tourbridge.models import DEFAULT_CONFIG_PATH, BridgeConfig, ModelFile

logger = logging.getLogger(__name__)

config_path_option = click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help='Config file'
)


@click.group(name="config")
def config():
    """Create, show or change bridge settings."""


@config.command(name="init")
@config_path_option
@click.option(
    '--force', '-f',
    is_flag=True,
    help='Overwrite an existing file (the old one is kept as .bak)'
)
def init(config_path: Path, force: bool):
    """Write a config file holding the default settings."""
    if config_path.exists() and not force:
        click.echo(f"ERROR: {config_path} already exists", err=True)
        click.echo("\nUse --force to replace it with the defaults.", err=True)
        sys.exit(1)

    _save(BridgeConfig(), config_path)


@config.command(name="show")
@config_path_option
@click.option(
    '--field',
    type=click.Choice(list(BridgeConfig.model_fields)),
    default=None,
    help='Only print this setting'
)
def show(config_path: Path, field: Optional[str]):
    """Print the settings the bridge would start with."""
    settings = _load(config_path)

    if field:
        click.echo(f"{field}: {getattr(settings, field)}")
        return

    source = config_path if ModelFile(config_path, BridgeConfig).exists() else "defaults"
    click.echo(f"BridgeConfig ({source}):")
    click.echo("=" * 60)
    for name, value in settings.model_dump().items():
        click.echo(f"  {name}: {value}")


@config.command(name="set")
@config_path_option
@click.option('--port', '-p', type=int, default=None, help='TCP port the console connects to')
@click.option('--host', '-H', 'bind_address', type=str, default=None, help='IPv4 address to bind')
@click.option('--read-timeout', type=float, default=None, help='Per-read deadline (seconds)')
@click.option('--recv-size', type=int, default=None, help='Maximum bytes per socket read')
def set_values(config_path: Path, **values):
    """Change settings and save them."""
    updates = {name: value for name, value in values.items() if value is not None}
    if not updates:
        click.echo("Nothing to change. See 'tourbridge config set --help'.", err=True)
        sys.exit(1)

    current = _load(config_path)
    try:
        changed = BridgeConfig.model_validate({**current.model_dump(), **updates})
    except ValidationError as e:
        _fail(wrap_pydantic_error(e, str(config_path)))

    for name, value in updates.items():
        click.echo(f"[OK] {name} = {value}")
    _save(changed, config_path)


def _load(config_path: Path) -> BridgeConfig:
    try:
        return BridgeConfig.load_or_default(config_path)
    except TourBridgeError as e:
        _fail(e)


def _save(settings: BridgeConfig, config_path: Path) -> None:
    had_file = config_path.exists()
    try:
        written = settings.save(config_path)
    except OSError as e:
        logger.error(f"Could not write {config_path}: {e}")
        click.echo(f"ERROR: Could not write {config_path}: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration saved to {written}")
    if had_file:
        click.echo(f"Previous file kept as {written.name}.bak")


def _fail(error: TourBridgeError) -> None:
    logger.error(f"config failed: {error}")
    user_message, recovery_hint = format_error_for_display(error)
    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    sys.exit(1)
