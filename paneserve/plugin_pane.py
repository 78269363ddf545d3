"""A pane whose content is rendered by a plugin."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple


@dataclass(frozen=True)
class PositionAndSize:
    """The placement of a pane on screen, in cells."""

    x: int = 0
    y: int = 0
    rows: int = 0
    cols: int = 0
    rows_fixed: bool = False
    cols_fixed: bool = False


class _PaneKind(enum.Enum):
    TERMINAL = "terminal"
    PLUGIN = "plugin"


@dataclass(frozen=True)
class PaneId:
    """Identifies a pane: a terminal by its pty descriptor, a plugin by its id."""

    kind: _PaneKind
    value: int

    @classmethod
    def terminal(cls, value: int) -> "PaneId":
        return cls(_PaneKind.TERMINAL, value)

    @classmethod
    def plugin(cls, value: int) -> "PaneId":
        return cls(_PaneKind.PLUGIN, value)

    @property
    def is_plugin(self) -> bool:
        return self.kind is _PaneKind.PLUGIN


RenderPlugin = Callable[[int, int, int], str]


def _checked(value: int, what: str) -> int:
    if value < 0:
        raise ValueError(f"{what} would become negative: {value}")
    return value


@dataclass
class PluginPane:
    """A pane drawn by the plugin ``pid``.

    ``render_plugin(pid, rows, columns)`` asks the plugin to draw itself and
    returns the rendered text.
    """

    pid: int
    position_and_size: PositionAndSize
    render_plugin: RenderPlugin
    should_render: bool = True
    selectable: bool = True
    invisible_borders: bool = False
    position_and_size_override: Optional[PositionAndSize] = None
    active_at: float = field(default_factory=time.monotonic)
    cursor: Optional[Tuple[int, int]] = None

    def _effective(self) -> PositionAndSize:
        return self.position_and_size_override or self.position_and_size

    def x(self) -> int:
        return self._effective().x

    def y(self) -> int:
        return self._effective().y

    def rows(self) -> int:
        return self._effective().rows

    def columns(self) -> int:
        return self._effective().cols

    def reset_size_and_position_override(self) -> None:
        self.position_and_size_override = None
        self.should_render = True

    def change_pos_and_size(self, position_and_size: PositionAndSize) -> None:
        self.position_and_size = position_and_size
        self.should_render = True

    def override_size_and_position(self, x: int, y: int, size: PositionAndSize) -> None:
        self.position_and_size_override = PositionAndSize(
            x=x, y=y, rows=size.rows, cols=size.cols
        )
        self.should_render = True

    def cursor_coordinates(self) -> Optional[Tuple[int, int]]:
        """The cursor position within the pane; plugins draw none by default."""
        return self.cursor

    def render(self) -> Optional[str]:
        # Every pane is rendered each time: skipping clean panes breaks wide
        # characters in a neighbouring pane.
        output = self.render_plugin(self.pid, self.rows(), self.columns())
        self.should_render = False
        return output

    def pane_id(self) -> PaneId:
        return PaneId.plugin(self.pid)

    def set_selectable(self, selectable: bool) -> None:
        self.selectable = selectable

    def set_invisible_borders(self, invisible_borders: bool) -> None:
        self.invisible_borders = invisible_borders

    def set_fixed_height(self, fixed_height: int) -> None:
        self.position_and_size = replace(
            self.position_and_size, rows=fixed_height, rows_fixed=True
        )

    def set_fixed_width(self, fixed_width: int) -> None:
        self.position_and_size = replace(
            self.position_and_size, cols=fixed_width, cols_fixed=True
        )

    def _update(self, *, redraw: bool, **changes: int) -> None:
        for name, value in changes.items():
            _checked(value, name)
        self.position_and_size = replace(self.position_and_size, **changes)
        if redraw:
            self.should_render = True

    def reduce_height_down(self, count: int) -> None:
        p = self.position_and_size
        self._update(redraw=True, y=p.y + count, rows=p.rows - count)

    def increase_height_down(self, count: int) -> None:
        self._update(redraw=True, rows=self.position_and_size.rows + count)

    def increase_height_up(self, count: int) -> None:
        p = self.position_and_size
        self._update(redraw=True, y=p.y - count, rows=p.rows + count)

    def reduce_height_up(self, count: int) -> None:
        self._update(redraw=True, rows=self.position_and_size.rows - count)

    def reduce_width_right(self, count: int) -> None:
        p = self.position_and_size
        self._update(redraw=True, x=p.x + count, cols=p.cols - count)

    def reduce_width_left(self, count: int) -> None:
        self._update(redraw=True, cols=self.position_and_size.cols - count)

    def increase_width_left(self, count: int) -> None:
        p = self.position_and_size
        self._update(redraw=True, x=p.x - count, cols=p.cols + count)

    def increase_width_right(self, count: int) -> None:
        self._update(redraw=True, cols=self.position_and_size.cols + count)

    def push_down(self, count: int) -> None:
        self._update(redraw=False, y=self.position_and_size.y + count)

    def push_right(self, count: int) -> None:
        self._update(redraw=False, x=self.position_and_size.x + count)

    def pull_left(self, count: int) -> None:
        self._update(redraw=False, x=self.position_and_size.x - count)

    def pull_up(self, count: int) -> None:
        self._update(redraw=False, y=self.position_and_size.y - count)

    def scroll_up(self, count: int) -> None:
        """Plugin panes do not scroll; only the count is validated."""
        _checked(count, "scroll count")

    def scroll_down(self, count: int) -> None:
        """Plugin panes do not scroll; only the count is validated."""
        _checked(count, "scroll count")

    def clear_scroll(self) -> None:
        """Plugin panes keep no scrollback, so clearing it scrolls by nothing."""
        self.scroll_down(0)

    def max_height(self) -> Optional[int]:
        p = self.position_and_size
        return p.rows if p.rows_fixed else None

    def max_width(self) -> Optional[int]:
        p = self.position_and_size
        return p.cols if p.cols_fixed else None