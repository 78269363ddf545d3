# paneserve

Server-side building blocks for a terminal multiplexer. The package covers styled
character cells, cursor and character set state, text selection, plugin panes, a
logging pipe for plugin output, and spawning and driving commands in pseudoterminals.
It is a library only and has no command-line entry point.

## Modules

### `paneserve.styles`

- `NamedColor`: the sixteen named colours. Each has a `foreground_code()` method and a
  `background_code()` method that return its SGR code as a string.
- `AnsiCode`: a single style value. It is one of `AnsiCode.ON`, `AnsiCode.RESET`,
  `AnsiCode.named(color)`, `AnsiCode.rgb(r, g, b)` or `AnsiCode.index(value)`. An
  out-of-range component or index raises `ValueError`.
- `CharacterStyles`: a dataclass of optional attributes: foreground, background, strike,
  hidden, reverse, slow_blink, fast_blink, underline, bold, dim and italic. It has these
  methods:
  - `add_style_from_ansi_params(params)` applies SGR parameters. Each item is one
    parameter, given as a sequence with its sub-parameters, for example `[[1], [38, 2, 255, 0, 0]]`.
  - `update_and_return_diff(new_styles)` adopts the new styles. It returns only the
    attributes that changed, or `None` when nothing changed.
  - `clear()` sets every attribute to unspecified, and `reset_all()` sets every
    attribute to reset.
  - `str(styles)` renders the escape sequences.
- `parse_sgr_color(params)` parses the `2;r;g;b` and `5;n` tails of an extended colour.
- `TerminalCharacter` is a character cell with a character, styles and width.
  `EMPTY_TERMINAL_CHARACTER` is a blank cell with every style reset.

### `paneserve.cursor`

- `Cursor` holds the position, the hidden flag, the pending styles and the charsets. It
  also holds a `shape`, which `change_shape()` sets.
- `CursorShape` lists the block, underline and beam shapes, each in a steady and a
  blinking form.
- `Charsets` holds the slots G0 to G3, indexed by `CharsetIndex`.
- `StandardCharset.map(c)` maps a character through its charset, with ASCII or DEC
  special character and line drawing.

### `paneserve.selection`

- `Position(line, column)` is ordered by line, then by column. A line may be negative,
  which refers to scrollback.
- `Selection` has these methods:
  - `begin`, `to` and `finish` follow a mouse drag.
  - `contains(row, col)`, `is_empty()`, `reset()`, `sorted()` and `line_indices()`
    report on and reset the selection.
  - `move_up(lines)` and `move_down(lines)` shift the selection. While the selection is
    active, only its start moves.
  - `diff(other, max_lines)` yields the visible line indices that need redrawing, in
    ascending order.

### `paneserve.logging_pipe`

`LoggingPipe(plugin_name, plugin_id)` is a write-only buffer for a plugin's stderr. It
behaves as follows:

- `write(data)` appends to the buffer. If the buffer would pass 16 KiB, it clears the
  buffer and raises `ValueError`.
- `flush()` logs each complete line at debug level through the standard `logging`
  module and drops those lines from the buffer. While the buffer is not valid UTF-8,
  `flush()` consumes nothing.
- `read()` always raises `OSError`, and so does `seek()`.
- `size()` and `bytes_available()` report the length of the buffer. `set_len()`
  truncates the buffer or pads it with zero bytes.

### `paneserve.plugin_pane`

- `PositionAndSize` is a frozen placement with `x`, `y`, `rows`, `cols` and fixed-size
  flags.
- `PaneId.terminal(n)` and `PaneId.plugin(n)` identify panes.
- `PluginPane(pid, position_and_size, render_plugin)` tracks the geometry of a plugin
  pane:
  - It can be resized with the `reduce_*` and `increase_*` methods and moved with
    `push_*` and `pull_*`. A change that would make a coordinate or size negative
    raises `ValueError`.
  - An override can be placed on the geometry with `override_size_and_position` and
    removed with `reset_size_and_position_override`.
  - `render()` calls `render_plugin(pid, rows, columns)` and returns its text.
  - Plugin panes do not scroll.

### `paneserve.os_input_output`

This module runs on POSIX only, because it uses `pty`, `termios` and `fcntl`.

- `RunCommand` describes a command to run, and `OpenFile` a file to open.
- `resolve_command(action, env)` picks the program to run:
  - for a file, `EDITOR` or `VISUAL`;
  - for a command, the command as given;
  - with no action, `SHELL`.

  When the variable it needs is missing, it raises `RuntimeError`.
- `spawn_terminal(action, orig_termios)` forks a pseudoterminal, runs the command in it,
  and returns `(fd, pid)`.
- `set_terminal_size_using_fd(fd, columns, rows)` sets the window size of a terminal.
- `handle_command_exit(child)` waits for a child process to exit. If SIGINT or SIGTERM
  arrives meanwhile, it passes the signal on to the child.
- `ServerOsInputOutput` wraps these functions. It also reads and writes tty data, calls
  `tcdrain`, and provides `kill` and `force_kill`. `get_server_os_input()` builds one
  from the terminal attributes of standard input.

## Example

```python
from paneserve.styles import CharacterStyles

styles = CharacterStyles()
styles.add_style_from_ansi_params([[1], [31]])
print(repr(str(styles)))  # '\x1b[31m\x1b[1m'

from paneserve.selection import Position, Selection

sel = Selection()
sel.begin(Position(1, 0))
sel.finish(Position(3, 5))
print(sel.contains(2, 40))  # True
```

## What it does not do

The package contains parts of a multiplexer, but not the multiplexer itself:

- There is no server process or client connection handling.
- There are no screen, tab or layout management, terminal grid or escape-sequence
  parser, and no terminal pane.
- There is no plugin runtime. A `PluginPane` only calls the render callback it is
  given, and a `LoggingPipe` only buffers and logs what is written to it.
- There is no command to run.

## Install

```
pip install .
```

## Tests

```
pip install .[test]
pytest
```