"""TourBox Console control table.

Every byte the console sends is one control code. Buttons come as a pair of
codes (one for press, one for release); the knob, dial and scroll wheel send a
single code per rotation tick in each direction.

The table is built once at import time and never mutated. Press↔release
pairing is indexed in both directions when the table is constructed, so
resolving a release to the press it clears is a dictionary lookup.
"""

from collections.abc import Iterable, Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ControlKind(Enum):
    """How a control code behaves."""

    PRESS = "press"              # Button went down
    RELEASE = "release"          # Button came up
    ROTATIONAL = "rotational"    # One tick of knob/dial/scroll movement


class ControlDefinition(BaseModel):
    """A single protocol code and what it means."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(ge=0, le=255, description="Protocol byte value")
    name: str = Field(description="Event name, e.g. 'C1 Press' or 'Knob CW'")
    kind: ControlKind
    paired_code: int | None = Field(
        default=None,
        ge=0,
        le=255,
        description="Matching release code for a press (and vice versa)",
    )

    @property
    def is_press(self) -> bool:
        return self.kind is ControlKind.PRESS

    @property
    def is_release(self) -> bool:
        return self.kind is ControlKind.RELEASE

    @property
    def is_rotational(self) -> bool:
        return self.kind is ControlKind.ROTATIONAL


# (press code, release code, base label)
_BUTTONS: list[tuple[int, int, str]] = [
    (0, 128, "Tall"),
    (1, 129, "Side"),
    (2, 130, "Top"),
    (3, 131, "Short"),
    (10, 138, "Scroll"),
    (16, 144, "Up"),
    (17, 145, "Down"),
    (18, 146, "Left"),
    (19, 147, "Right"),
    (34, 162, "C1"),
    (35, 163, "C2"),
    (42, 170, "Tour"),
    (55, 183, "Knob"),
    (56, 184, "Dial"),
]

_ROTATIONS: list[tuple[int, str]] = [
    (132, "Knob CCW"),
    (196, "Knob CW"),
    (137, "Scroll Down"),
    (201, "Scroll Up"),
    (143, "Dial CCW"),
    (207, "Dial CW"),
]


class ControlTable:
    """
    Read-only lookup of control definitions.

    Provides lookup by code and by name, plus O(1) press↔release pairing.
    """

    PRESS_SUFFIX = " Press"

    def __init__(self, definitions: Iterable[ControlDefinition]):
        """
        Build the table and its indexes.

        Args:
            definitions: Control definitions; codes and names must be unique

        Raises:
            ValueError: On duplicate codes/names or inconsistent pairing
        """
        self._by_code: dict[int, ControlDefinition] = {}
        self._by_name: dict[str, ControlDefinition] = {}

        for definition in definitions:
            if definition.code in self._by_code:
                raise ValueError(f"Duplicate control code: {definition.code}")
            if definition.name in self._by_name:
                raise ValueError(f"Duplicate control name: {definition.name}")
            self._by_code[definition.code] = definition
            self._by_name[definition.name] = definition

        self._press_for_release: dict[int, int] = {}
        self._release_for_press: dict[int, int] = {}

        for definition in self._by_code.values():
            if definition.is_rotational:
                if definition.paired_code is not None:
                    raise ValueError(f"Rotational control {definition.name!r} cannot be paired")
                continue

            partner = self._by_code.get(definition.paired_code) if definition.paired_code is not None else None
            if partner is None or partner.paired_code != definition.code or partner.kind is definition.kind:
                raise ValueError(f"Control {definition.name!r} has no matching press/release partner")

            if definition.is_press:
                self._release_for_press[definition.code] = partner.code
            else:
                self._press_for_release[definition.code] = partner.code

    @classmethod
    def default(cls) -> "ControlTable":
        """Build the TourBox Console table."""
        definitions: list[ControlDefinition] = []
        for press, release, label in _BUTTONS:
            definitions.append(
                ControlDefinition(code=press, name=f"{label} Press", kind=ControlKind.PRESS, paired_code=release)
            )
            definitions.append(
                ControlDefinition(code=release, name=f"{label} Release", kind=ControlKind.RELEASE, paired_code=press)
            )
        for code, name in _ROTATIONS:
            definitions.append(ControlDefinition(code=code, name=name, kind=ControlKind.ROTATIONAL))
        return cls(definitions)

    def get(self, code: int) -> ControlDefinition | None:
        """Look up a code; None if the console never sends it."""
        return self._by_code.get(code)

    def get_by_name(self, name: str) -> ControlDefinition | None:
        """Look up a control by its exact event name."""
        return self._by_name.get(name)

    def resolve_name(self, name: str) -> int | None:
        """
        Resolve a name to a code for held-state queries.

        Tries the exact name first, then ``"<name> Press"`` so callers can ask
        about "C1" instead of "C1 Press".

        Returns:
            The code, or None if neither form is a known control
        """
        definition = self._by_name.get(name)
        if definition is None:
            definition = self._by_name.get(name + self.PRESS_SUFFIX)
        return definition.code if definition else None

    def press_for_release(self, release_code: int) -> int | None:
        """Press code cleared by a release code."""
        return self._press_for_release.get(release_code)

    def release_for_press(self, press_code: int) -> int | None:
        """Release code that clears a press code."""
        return self._release_for_press.get(press_code)

    def is_press_code(self, code: int) -> bool:
        return code in self._release_for_press

    @property
    def press_codes(self) -> frozenset[int]:
        return frozenset(self._release_for_press)

    @property
    def names(self) -> list[str]:
        """All control names in table order."""
        return list(self._by_name)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __iter__(self) -> Iterator[ControlDefinition]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)


CONTROL_TABLE = ControlTable.default()
