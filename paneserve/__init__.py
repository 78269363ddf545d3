"""Building blocks for a terminal multiplexer server.

Modules cover character styles, cursor and charset state, text selection,
a plugin logging pipe, plugin panes and pseudoterminal handling.
"""

__version__ = "0.1.0"

__all__ = [
    "styles",
    "cursor",
    "selection",
    "logging_pipe",
    "plugin_pane",
    "os_input_output",
]