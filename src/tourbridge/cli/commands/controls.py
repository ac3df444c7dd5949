"""Controls command: show the control table."""

import click

from tourbridge.protocol import CONTROL_TABLE, ControlKind


@click.command(name="controls")
@click.option(
    '--kind', '-k',
    type=click.Choice([kind.value for kind in ControlKind], case_sensitive=False),
    default=None,
    help='Only show controls of this kind'
)
def controls(kind):
    """List every control code the console sends."""
    click.echo(f"{'Code':>5}  {'Hex':<4}  {'Kind':<10}  {'Name':<16}  Paired")
    click.echo("-" * 50)

    for definition in CONTROL_TABLE:
        if kind and definition.kind.value != kind.lower():
            continue

        paired = ""
        if definition.paired_code is not None:
            paired = CONTROL_TABLE.get(definition.paired_code).name

        click.echo(
            f"{definition.code:>5}  {definition.code:02x}    "
            f"{definition.kind.value:<10}  {definition.name:<16}  {paired}"
        )
