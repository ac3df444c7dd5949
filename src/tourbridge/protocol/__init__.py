"""TourBox wire protocol: control table and byte-stream decoding."""

from .controls import CONTROL_TABLE, ControlDefinition, ControlKind, ControlTable
from .decoder import ControlDecoder, bytes_from_hex, group_runs, to_hex

__all__ = [
    "CONTROL_TABLE",
    "ControlDecoder",
    "ControlDefinition",
    "ControlKind",
    "ControlTable",
    "bytes_from_hex",
    "group_runs",
    "to_hex",
]
