"""Decode command: turn captured hex into control events offline."""

import click

from tourbridge.core import ButtonStateStore
from tourbridge.protocol import CONTROL_TABLE, ControlDecoder, bytes_from_hex


@click.command(name="decode")
@click.argument('hex_text', nargs=-1, required=True)
@click.option(
    '--show-held/--no-show-held',
    default=False,
    help='Print the held buttons after decoding (default: disabled)'
)
def decode(hex_text: tuple[str, ...], show_held: bool):
    """
    Decode hex bytes as if they arrived from a console.

    All arguments form one chunk, so "84 84 c4" and "8484c4" are the same
    input. A trailing odd nibble is ignored.
    """
    text = " ".join(hex_text)
    try:
        data = bytes_from_hex(text)
    except ValueError as e:
        raise click.BadParameter(f"'{text}' is not valid hex ({e})", param_hint="HEX_TEXT")

    store = ButtonStateStore()
    decoder = ControlDecoder(store)

    events = list(decoder.decode(data))
    if not events:
        click.echo("No controls decoded.")

    for event in events:
        click.echo(f"{event.name} x{event.count}  (code {event.code})")

    if show_held:
        held = [CONTROL_TABLE.get(code).name for code in store.held_codes()]
        click.echo(f"Held: {', '.join(held) if held else 'none'}")
