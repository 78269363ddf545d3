"""Character styles and SGR (Select Graphic Rendition) handling."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, fields, replace
from itertools import chain
from typing import ClassVar, Iterable, Iterator, Optional, Sequence, Union

logger = logging.getLogger(__name__)

ESC = "\x1b"


class NamedColor(enum.Enum):
    """The sixteen named terminal colours, valued by their foreground SGR code."""

    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37
    BRIGHT_BLACK = 90
    BRIGHT_RED = 91
    BRIGHT_GREEN = 92
    BRIGHT_YELLOW = 93
    BRIGHT_BLUE = 94
    BRIGHT_MAGENTA = 95
    BRIGHT_CYAN = 96
    BRIGHT_WHITE = 97

    def foreground_code(self) -> str:
        return str(self.value)

    def background_code(self) -> str:
        return str(self.value + 10)


class _Kind(enum.Enum):
    ON = "on"
    RESET = "reset"
    NAMED = "named"
    RGB = "rgb"
    INDEX = "index"


@dataclass(frozen=True)
class AnsiCode:
    """A single style value: on, reset, a named colour, an RGB triple or a palette index."""

    kind: _Kind
    value: Union[NamedColor, tuple, int, None] = None

    ON: ClassVar["AnsiCode"]
    RESET: ClassVar["AnsiCode"]

    @classmethod
    def named(cls, color: NamedColor) -> "AnsiCode":
        return cls(_Kind.NAMED, color)

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> "AnsiCode":
        for component in (r, g, b):
            if not 0 <= component <= 255:
                raise ValueError(f"colour component out of range: {component}")
        return cls(_Kind.RGB, (r, g, b))

    @classmethod
    def index(cls, value: int) -> "AnsiCode":
        if not 0 <= value <= 255:
            raise ValueError(f"colour index out of range: {value}")
        return cls(_Kind.INDEX, value)

    @property
    def is_on(self) -> bool:
        return self.kind is _Kind.ON

    @property
    def is_reset(self) -> bool:
        return self.kind is _Kind.RESET


AnsiCode.ON = AnsiCode(_Kind.ON)
AnsiCode.RESET = AnsiCode(_Kind.RESET)


def parse_sgr_color(params: Iterable[int]) -> Optional[AnsiCode]:
    """Parse the tail of an extended colour sequence (``2;r;g;b`` or ``5;n``).

    Only as many values as needed are consumed from ``params``.
    """
    it = iter(params)
    mode = next(it, None)
    if mode == 2:
        components = []
        for _ in range(3):
            value = next(it, None)
            if value is None or not 0 <= value <= 255:
                return None
            components.append(value)
        return AnsiCode.rgb(*components)
    if mode == 5:
        value = next(it, None)
        if value is None or not 0 <= value <= 255:
            return None
        return AnsiCode.index(value)
    return None


_FIELD_ORDER = (
    "foreground",
    "background",
    "strike",
    "hidden",
    "reverse",
    "slow_blink",
    "fast_blink",
    "underline",
    "bold",
    "dim",
    "italic",
)

_SIMPLE_SGR = {
    1: (("bold", AnsiCode.ON),),
    2: (("dim", AnsiCode.ON),),
    3: (("italic", AnsiCode.ON),),
    4: (("underline", AnsiCode.ON),),
    5: (("slow_blink", AnsiCode.ON),),
    6: (("fast_blink", AnsiCode.ON),),
    7: (("reverse", AnsiCode.ON),),
    8: (("hidden", AnsiCode.ON),),
    9: (("strike", AnsiCode.ON),),
    21: (("bold", AnsiCode.RESET),),
    22: (("bold", AnsiCode.RESET), ("dim", AnsiCode.RESET)),
    23: (("italic", AnsiCode.RESET),),
    24: (("underline", AnsiCode.RESET),),
    25: (("slow_blink", AnsiCode.RESET), ("fast_blink", AnsiCode.RESET)),
    27: (("reverse", AnsiCode.RESET),),
    28: (("hidden", AnsiCode.RESET),),
    29: (("strike", AnsiCode.RESET),),
    39: (("foreground", AnsiCode.RESET),),
    49: (("background", AnsiCode.RESET),),
}
for _color in NamedColor:
    _SIMPLE_SGR[_color.value] = (("foreground", AnsiCode.named(_color)),)
    _SIMPLE_SGR[_color.value + 10] = (("background", AnsiCode.named(_color)),)

# (attribute, code when on, code when reset) in rendering order up to bold.
_TOGGLES_BEFORE_BOLD = (
    ("strike", "9", "29"),
    ("hidden", "8", "28"),
    ("reverse", "7", "27"),
    ("fast_blink", "6", "25"),
    ("slow_blink", "5", "25"),
)


@dataclass
class CharacterStyles:
    """The set of SGR attributes applied to a character; ``None`` means unspecified."""

    foreground: Optional[AnsiCode] = None
    background: Optional[AnsiCode] = None
    strike: Optional[AnsiCode] = None
    hidden: Optional[AnsiCode] = None
    reverse: Optional[AnsiCode] = None
    slow_blink: Optional[AnsiCode] = None
    fast_blink: Optional[AnsiCode] = None
    underline: Optional[AnsiCode] = None
    bold: Optional[AnsiCode] = None
    dim: Optional[AnsiCode] = None
    italic: Optional[AnsiCode] = None

    def clear(self) -> None:
        for name in _FIELD_ORDER:
            setattr(self, name, None)

    def reset_all(self) -> None:
        for name in _FIELD_ORDER:
            setattr(self, name, AnsiCode.RESET)

    def _is_full_reset(self) -> bool:
        return all(getattr(self, name) == AnsiCode.RESET for name in _FIELD_ORDER)

    def update_and_return_diff(self, new_styles: "CharacterStyles") -> Optional["CharacterStyles"]:
        """Adopt ``new_styles`` and return only what changed, or ``None`` if nothing did."""
        if new_styles._is_full_reset():
            self.reset_all()
            return replace(new_styles)

        diff: Optional[CharacterStyles] = None
        for name in _FIELD_ORDER:
            new_value = getattr(new_styles, name)
            if getattr(self, name) != new_value:
                if diff is None:
                    diff = CharacterStyles()
                setattr(diff, name, new_value)
                setattr(self, name, new_value)
        return diff

    def add_style_from_ansi_params(self, params: Iterable[Sequence[int]]) -> None:
        """Apply SGR parameters; each item is a parameter with its sub-parameters."""
        it: Iterator[Sequence[int]] = iter(params)
        for param in it:
            param = list(param)
            if not param or param == [0]:
                self.reset_all()
                continue
            if len(param) == 1 and param[0] in _SIMPLE_SGR:
                for name, value in _SIMPLE_SGR[param[0]]:
                    setattr(self, name, value)
                continue
            if param[0] in (38, 48):
                target = "foreground" if param[0] == 38 else "background"
                rest = param[1:]
                if rest:
                    rgb_start = 2 if len(rest) > 4 else 1
                    values: Iterable[int] = chain([rest[0]], rest[rgb_start:])
                else:
                    values = (p[0] for p in it)
                code = parse_sgr_color(values)
                if code is not None:
                    setattr(self, target, code)
                continue
            logger.debug("unhandled csi m code %r", param)
            return

    def __str__(self) -> str:
        if self._is_full_reset():
            return f"{ESC}[m"

        out = []
        for name, prefix, reset_code in (
            ("foreground", "38", "39"),
            ("background", "48", "49"),
        ):
            code = getattr(self, name)
            if code is None:
                continue
            if code.kind is _Kind.RGB:
                r, g, b = code.value
                out.append(f"{ESC}[{prefix};2;{r};{g};{b}m")
            elif code.kind is _Kind.INDEX:
                out.append(f"{ESC}[{prefix};5;{code.value}m")
            elif code.kind is _Kind.RESET:
                out.append(f"{ESC}[{reset_code}m")
            elif code.kind is _Kind.NAMED:
                color_code = (
                    code.value.foreground_code()
                    if name == "foreground"
                    else code.value.background_code()
                )
                out.append(f"{ESC}[{color_code}m")

        for name, on_code, reset_code in _TOGGLES_BEFORE_BOLD:
            out.append(_toggle(getattr(self, name), on_code, reset_code))

        # bold must precede underline: its reset also cancels underline
        if self.bold == AnsiCode.ON:
            out.append(f"{ESC}[1m")
        elif self.bold == AnsiCode.RESET:
            out.append(f"{ESC}[22m{ESC}[24m")

        out.append(_toggle(self.underline, "4", "24"))

        if self.dim == AnsiCode.ON:
            out.append(f"{ESC}[2m")
        elif self.dim == AnsiCode.RESET and self.bold == AnsiCode.RESET:
            out.append(f"{ESC}[22m")

        out.append(_toggle(self.italic, "3", "23"))
        return "".join(out)


def _toggle(code: Optional[AnsiCode], on_code: str, reset_code: str) -> str:
    if code == AnsiCode.ON:
        return f"{ESC}[{on_code}m"
    if code == AnsiCode.RESET:
        return f"{ESC}[{reset_code}m"
    return ""


def _reset_styles() -> CharacterStyles:
    styles = CharacterStyles()
    styles.reset_all()
    return styles


@dataclass
class TerminalCharacter:
    """A character cell: the character, its styles and its display width."""

    character: str = " "
    styles: CharacterStyles = field(default_factory=CharacterStyles)
    width: int = 1

    def __str__(self) -> str:
        return self.character


EMPTY_TERMINAL_CHARACTER = TerminalCharacter(" ", _reset_styles(), 1)