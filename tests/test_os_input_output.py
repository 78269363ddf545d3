import fcntl
import os
import pty
import select
import signal
import struct
import subprocess
import sys
import termios
import threading
from unittest import mock

import pytest

from paneserve.os_input_output import (
    OpenFile,
    RunCommand,
    ServerOsInputOutput,
    get_server_os_input,
    handle_command_exit,
    resolve_command,
    spawn_terminal,
)


@pytest.fixture
def pty_pair():
    master, slave = pty.openpty()
    yield master, slave
    for fd in (master, slave):
        try:
            os.close(fd)
        except OSError:
            pass


def _window_size(fd):
    raw = fcntl.ioctl(fd, termios.TIOCGWINSZ, bytes(8))
    return struct.unpack("HHHH", raw)[:2]


def _read_until_eof(fd, timeout=10.0):
    chunks = []
    while True:
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            break
        try:
            data = os.read(fd, 4096)
        except OSError:
            break
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def test_resolve_run_command_is_returned_unchanged():
    cmd = RunCommand("htop", ["-d", "5"])
    assert resolve_command(cmd, {}) is cmd


def test_resolve_open_file_uses_editor():
    result = resolve_command(OpenFile("/tmp/notes.txt"), {"EDITOR": "myeditor", "VISUAL": "other"})
    assert result == RunCommand("myeditor", ["/tmp/notes.txt"])


def test_resolve_open_file_falls_back_to_visual():
    result = resolve_command(OpenFile("/tmp/notes.txt"), {"VISUAL": "other"})
    assert result == RunCommand("other", ["/tmp/notes.txt"])


def test_resolve_open_file_without_editor_raises():
    with pytest.raises(RuntimeError, match="EDITOR or VISUAL"):
        resolve_command(OpenFile("/tmp/notes.txt"), {"SHELL": "/bin/sh"})


def test_resolve_none_starts_shell():
    assert resolve_command(None, {"SHELL": "/bin/zsh"}) == RunCommand("/bin/zsh", [])


def test_resolve_none_without_shell_raises():
    with pytest.raises(RuntimeError, match="SHELL"):
        resolve_command(None, {})


def test_server_sets_terminal_size(pty_pair):
    master, slave = pty_pair
    os_io = ServerOsInputOutput(None)
    os_io.set_terminal_size_using_fd(master, 132, 50)
    assert _window_size(master) == (50, 132)


def test_write_to_tty_stdin_reports_length(pty_pair):
    master, slave = pty_pair
    os_io = ServerOsInputOutput(None)
    data = b"abc\n"
    assert os_io.write_to_tty_stdin(master, data) == len(data)
    assert os.read(slave, 1024) == data


def test_read_from_tty_stdout_after_tcdrain(pty_pair):
    master, slave = pty_pair
    os_io = ServerOsInputOutput(None)
    os.write(slave, b"xyz")
    os_io.tcdrain(slave)
    assert os_io.read_from_tty_stdout(master, 1024) == b"xyz"


def test_kill_terminates_and_reaps():
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    os_io = ServerOsInputOutput(None)
    os_io.kill(child.pid)
    with pytest.raises(ProcessLookupError):
        os.kill(child.pid, 0)


def test_force_kill_sends_sigkill():
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    ServerOsInputOutput(None).force_kill(child.pid)
    assert child.wait(timeout=10) == -signal.SIGKILL


def test_handle_command_exit_returns_when_child_exits():
    child = subprocess.Popen([sys.executable, "-c", "pass"])
    handle_command_exit(child)
    assert child.returncode == 0


def test_handle_command_exit_passes_on_sigterm():
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    timer = threading.Timer(0.2, os.kill, args=(os.getpid(), signal.SIGTERM))
    timer.start()
    try:
        handle_command_exit(child)
    finally:
        timer.join()
    assert child.wait(timeout=10) in (-signal.SIGTERM, -signal.SIGKILL)
    assert signal.getsignal(signal.SIGTERM) is not None


def test_spawn_terminal_runs_command():
    fd, pid = spawn_terminal(
        RunCommand(sys.executable, ["-c", "print('hello')"]), None
    )
    try:
        output = _read_until_eof(fd)
    finally:
        os.close(fd)
        _, status = os.waitpid(pid, 0)
    assert b"hello" in output
    assert os.waitstatus_to_exitcode(status) == 0


def test_server_spawn_terminal_with_termios(pty_pair):
    master, slave = pty_pair
    attrs = termios.tcgetattr(slave)
    os_io = ServerOsInputOutput(attrs)
    fd, pid = os_io.spawn_terminal(
        RunCommand(sys.executable, ["-c", "print('from pane')"])
    )
    try:
        output = _read_until_eof(fd)
    finally:
        os.close(fd)
        os.waitpid(pid, 0)
    assert b"from pane" in output


def test_spawn_terminal_without_editor_raises_in_parent(monkeypatch):
    monkeypatch.delenv("EDITOR", raising=False)
    monkeypatch.delenv("VISUAL", raising=False)
    with pytest.raises(RuntimeError):
        spawn_terminal(OpenFile("/tmp/notes.txt"), None)


def test_get_server_os_input_reads_stdin_attributes():
    attrs = [1, 2, 3, 4, 5, 6, [b"\x00"] * 32]
    with mock.patch("termios.tcgetattr", return_value=attrs) as tcgetattr:
        os_io = get_server_os_input()
    tcgetattr.assert_called_once_with(0)
    assert os_io.orig_termios == attrs


def test_get_server_os_input_propagates_error():
    with mock.patch("termios.tcgetattr", side_effect=termios.error(25, "not a tty")):
        with pytest.raises(termios.error):
            get_server_os_input()