"""
TourBox byte-stream decoding.

Input Flow: Console → ControlEvent
==================================

::

    TCP chunk: 84 84 84 c4 22
          ↓
    group_runs()         → (132, 3) (196, 1) (34, 1)
          ↓
    ControlDecoder       → Knob CCW x3, Knob CW x1, C1 Press x1
          ↓                (C1 Press marked held in the ButtonStateStore)
    Session forwards each event to the sink

Run-length grouping
-------------------

The console sends one byte per rotation tick and repeats a button's press
byte while it is held. Consecutive identical bytes are therefore collapsed
into one ``(code, count)`` group, so a sink sees "moved 3 ticks" instead of
three separate events.

Resolution never fails: codes missing from the control table are dropped.
"""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from tourbridge.protocol.controls import CONTROL_TABLE, ControlKind, ControlTable
from tourbridge.protocols.events import ControlEvent

if TYPE_CHECKING:
    from tourbridge.core.button_state import ButtonStateStore

logger = logging.getLogger(__name__)


def group_runs(data: bytes) -> Iterator[tuple[int, int]]:
    """
    Collapse runs of identical consecutive bytes.

    Args:
        data: Raw bytes as read from the socket

    Yields:
        ``(code, count)`` for each maximal run, in input order
    """
    if not data:
        return

    current = data[0]
    count = 1
    for value in data[1:]:
        if value == current:
            count += 1
        else:
            yield current, count
            current = value
            count = 1
    yield current, count


def bytes_from_hex(text: str) -> bytes:
    """
    Parse hex text into bytes, ignoring whitespace.

    A trailing odd nibble is an incomplete byte and is dropped; every
    complete byte before it is kept.

    Raises:
        ValueError: If the text contains non-hex characters
    """
    digits = "".join(text.split())
    if len(digits) % 2:
        logger.debug(f"Dropping incomplete trailing nibble {digits[-1]!r}")
        digits = digits[:-1]
    return bytes.fromhex(digits)


def to_hex(data: bytes) -> str:
    """Lowercase hex dump used in debug logs."""
    return data.hex()


class ControlDecoder:
    """
    Resolves byte groups to control events and tracks held buttons.

    One decoder belongs to one session; the ButtonStateStore it updates is
    shared with every other session of the same server.
    """

    def __init__(
        self,
        store: "ButtonStateStore",
        table: ControlTable = CONTROL_TABLE,
        server_id: int = 0,
    ) -> None:
        """
        Initialize decoder.

        Args:
            store: Held-state store to update on press/release
            table: Control table used to resolve codes
            server_id: Server id stamped on emitted events
        """
        self.store = store
        self.table = table
        self.server_id = server_id

    def decode(self, data: bytes) -> Iterator[ControlEvent]:
        """
        Decode one chunk.

        This is a generator: the held state for a group is updated right
        before its event is yielded, so a consumer that queries the store
        while handling an event sees the state as of that event.

        Args:
            data: Raw bytes

        Yields:
            ControlEvent for every group whose code is known
        """
        for code, count in group_runs(data):
            event = self.resolve(code, count)
            if event is not None:
                yield event

    def resolve(self, code: int, count: int) -> ControlEvent | None:
        """
        Resolve one group, updating held state.

        Args:
            code: Protocol byte value
            count: Run length of the group

        Returns:
            The event, or None for unknown codes
        """
        definition = self.table.get(code)
        if definition is None:
            logger.debug(f"Unhandled control ({code}) x{count}")
            return None

        if definition.kind is ControlKind.PRESS:
            self.store.set_held(code, True)
            logger.debug(f"{definition.name} - HELD")

        elif definition.kind is ControlKind.RELEASE:
            press_code = self.table.press_for_release(code)
            if press_code is not None and self.store.release_if_held(press_code):
                logger.debug(f"{definition.name} - RELEASED (cleared press code {press_code})")

        # Rotational controls carry no state

        return ControlEvent(
            name=definition.name,
            count=count,
            code=code,
            server_id=self.server_id,
        )
