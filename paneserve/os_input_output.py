"""Operating-system services for the server: pseudoterminals, processes and tty I/O."""

from __future__ import annotations

import contextlib
import copy
import fcntl
import os
import pty
import signal
import struct
import subprocess
import sys
import termios
import threading
import time
import traceback
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Mapping, Optional, Tuple, Union

_EDITOR_MISSING = (
    "Can't edit files if an editor is not defined. To fix: define the EDITOR or VISUAL "
    "environment variables with the path to your editor (eg. /usr/bin/vim)"
)
_SHELL_MISSING = "Could not find the SHELL variable"

_POLL_INTERVAL = 0.01
_TERMINATE_ATTEMPTS = 3


@dataclass
class RunCommand:
    """A command to run in a new terminal, with its arguments."""

    command: str
    args: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.command = os.fspath(self.command)
        self.args = [os.fspath(arg) for arg in self.args]


@dataclass(frozen=True)
class OpenFile:
    """A file to open in the user's editor in a new terminal."""

    path: Union[str, os.PathLike]


TerminalAction = Union[RunCommand, OpenFile]


def resolve_command(
    terminal_action: Optional[TerminalAction], env: Optional[Mapping[str, str]] = None
) -> RunCommand:
    """Work out the command a new terminal runs.

    A file is opened with ``EDITOR`` (or ``VISUAL``), a command is run as given, and
    with no action the user's ``SHELL`` is started.
    """
    env = os.environ if env is None else env
    if isinstance(terminal_action, OpenFile):
        editor = env.get("EDITOR") or env.get("VISUAL")
        if editor is None:
            raise RuntimeError(_EDITOR_MISSING)
        return RunCommand(editor, [os.fspath(terminal_action.path)])
    if isinstance(terminal_action, RunCommand):
        return terminal_action
    if terminal_action is None:
        shell = env.get("SHELL")
        if shell is None:
            raise RuntimeError(_SHELL_MISSING)
        return RunCommand(shell, [])
    raise TypeError(f"unknown terminal action: {terminal_action!r}")


def set_terminal_size_using_fd(fd: int, columns: int, rows: int) -> None:
    """Set the window size of the terminal behind ``fd``; failures are ignored."""
    winsize = struct.pack("HHHH", rows, columns, 0, 0)
    with contextlib.suppress(OSError):
        fcntl.ioctl(fd, termios.TIOCSWINSZ, winsize)


@contextlib.contextmanager
def _exit_signals_caught(on_signal: Callable[[], None]) -> Iterator[None]:
    """Route SIGINT and SIGTERM to ``on_signal`` while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum, frame) -> None:
        on_signal()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old if old is not None else signal.SIG_DFL)


def handle_command_exit(child: subprocess.Popen) -> None:
    """Wait for ``child`` to exit, passing on SIGINT/SIGTERM received meanwhile.

    After such a signal the child is asked to terminate a few times, then killed.
    """
    should_exit = threading.Event()
    attempts = _TERMINATE_ATTEMPTS
    with _exit_signals_caught(should_exit.set):
        while child.poll() is None:
            time.sleep(_POLL_INTERVAL)
            if not should_exit.is_set():
                continue
            if attempts > 0:
                attempts -= 1
                child.send_signal(signal.SIGTERM)
            else:
                child.kill()
                return


def spawn_terminal(
    terminal_action: Optional[TerminalAction], orig_termios: Optional[list]
) -> Tuple[int, int]:
    """Start the terminal action in a new pseudoterminal.

    Returns the primary side's file descriptor and the pid of the process behind it.
    """
    cmd = resolve_command(terminal_action)
    pid, fd = pty.fork()
    if pid == 0:
        status = 0
        try:
            if orig_termios is not None:
                termios.tcsetattr(0, termios.TCSANOW, orig_termios)
            child = subprocess.Popen([cmd.command, *cmd.args])
            handle_command_exit(child)
        except BaseException:
            traceback.print_exc(file=sys.__stderr__)
            status = 1
        finally:
            os._exit(status)
    return fd, pid


@dataclass
class ServerOsInputOutput:
    """The server's access to terminals and processes."""

    orig_termios: Optional[list]
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def set_terminal_size_using_fd(self, fd: int, cols: int, rows: int) -> None:
        set_terminal_size_using_fd(fd, cols, rows)

    def spawn_terminal(self, terminal_action: Optional[TerminalAction]) -> Tuple[int, int]:
        with self._lock:
            orig_termios = copy.deepcopy(self.orig_termios)
        return spawn_terminal(terminal_action, orig_termios)

    def read_from_tty_stdout(self, fd: int, size: int) -> bytes:
        """Read up to ``size`` bytes that the terminal behind ``fd`` produced."""
        return os.read(fd, size)

    def write_to_tty_stdin(self, fd: int, data: bytes) -> int:
        """Write ``data`` to the terminal's input; returns the number of bytes written."""
        return os.write(fd, data)

    def tcdrain(self, fd: int) -> None:
        """Wait until everything written to ``fd`` has been transmitted."""
        termios.tcdrain(fd)

    def kill(self, pid: int) -> None:
        """Terminate ``pid`` with SIGTERM and reap it."""
        os.kill(pid, signal.SIGTERM)
        os.waitpid(pid, 0)

    def force_kill(self, pid: int) -> None:
        """Kill ``pid`` with SIGKILL, ignoring a process that is already gone."""
        with contextlib.suppress(ProcessLookupError):
            os.kill(pid, signal.SIGKILL)


def get_server_os_input() -> ServerOsInputOutput:
    """Build the server's OS access from the terminal attributes of standard input."""
    return ServerOsInputOutput(termios.tcgetattr(0))