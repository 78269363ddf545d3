"""Cursor state: position, pending styles, character sets and shape."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List

from paneserve.styles import CharacterStyles


class CharsetIndex(enum.IntEnum):
    """One of the four designatable character set slots."""

    G0 = 0
    G1 = 1
    G2 = 2
    G3 = 3


_LINE_DRAWING = {
    "`": "◆",
    "a": "▒",
    "b": "␉",
    "c": "␌",
    "d": "␍",
    "e": "␊",
    "f": "°",
    "g": "±",
    "h": "␤",
    "i": "␋",
    "j": "┘",
    "k": "┐",
    "l": "┌",
    "m": "└",
    "n": "┼",
    "o": "⎺",
    "p": "⎻",
    "q": "─",
    "r": "⎼",
    "s": "⎽",
    "t": "├",
    "u": "┤",
    "v": "┴",
    "w": "┬",
    "x": "│",
    "y": "≤",
    "z": "≥",
    "{": "π",
    "|": "≠",
    "}": "£",
    "~": "·",
}


class StandardCharset(enum.Enum):
    """A character set a slot can be designated to."""

    ASCII = "ascii"
    SPECIAL_CHARACTER_AND_LINE_DRAWING = "special_character_and_line_drawing"

    def map(self, c: str) -> str:
        """Map ``c`` through this character set."""
        if self is StandardCharset.ASCII:
            return c
        return _LINE_DRAWING.get(c, c)


def _default_charsets() -> List[StandardCharset]:
    return [StandardCharset.ASCII] * len(CharsetIndex)


@dataclass
class Charsets:
    """The character sets designated to the G0 to G3 slots."""

    slots: List[StandardCharset] = field(default_factory=_default_charsets)

    def __post_init__(self) -> None:
        if len(self.slots) != len(CharsetIndex):
            raise ValueError(f"expected {len(CharsetIndex)} charsets, got {len(self.slots)}")
        self.slots = list(self.slots)

    def __getitem__(self, index: CharsetIndex) -> StandardCharset:
        return self.slots[CharsetIndex(index)]

    def __setitem__(self, index: CharsetIndex, charset: StandardCharset) -> None:
        self.slots[CharsetIndex(index)] = charset


class CursorShape(enum.Enum):
    """How the cursor is drawn."""

    BLOCK = "block"
    BLINKING_BLOCK = "blinking_block"
    UNDERLINE = "underline"
    BLINKING_UNDERLINE = "blinking_underline"
    BEAM = "beam"
    BLINKING_BEAM = "blinking_beam"


@dataclass
class Cursor:
    """The cursor of a grid, with the styles applied to the next character written."""

    x: int
    y: int
    is_hidden: bool = False
    pending_styles: CharacterStyles = field(default_factory=CharacterStyles)
    charsets: Charsets = field(default_factory=Charsets)
    _shape: CursorShape = field(default=CursorShape.BLOCK, init=False, repr=False)

    @property
    def shape(self) -> CursorShape:
        return self._shape

    def change_shape(self, shape: CursorShape) -> None:
        self._shape = shape