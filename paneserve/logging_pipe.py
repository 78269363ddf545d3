"""A write-only pipe that turns a plugin's stderr output into log records."""

from __future__ import annotations

import errno
import io
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

MAX_PIPE_BUFFER_SIZE = 16_384

_OVERFLOW_MESSAGE = (
    "Exceeded log buffer size. Make sure that your plugin calls flush on stderr on "
    "valid UTF-8 symbol boundary. Aditionally, make sure that your log message contains "
    "endline \\n symbol."
)


def _timestamp() -> str:
    now = datetime.now()
    return now.strftime("%Y-%m-%d %H:%M:%S.") + f"{now.microsecond // 1000:03d}"


class LoggingPipe:
    """Buffers bytes written by a plugin and logs each complete line on flush."""

    def __init__(self, plugin_name: str, plugin_id: int) -> None:
        self.plugin_name = plugin_name
        self.plugin_id = plugin_id
        self.linked = True
        self._buffer = bytearray()

    def _log_message(self, message: str) -> None:
        ident = f"id: {self.plugin_id}"
        logger.debug(
            "|%s| %s [%s] %s",
            f"{self.plugin_name:<25.25}",
            _timestamp(),
            f"{ident:<10.15}",
            message,
        )

    def write(self, data: bytes) -> int:
        """Append ``data`` to the buffer; raise ValueError and drop the buffer on overflow."""
        if len(self._buffer) + len(data) > MAX_PIPE_BUFFER_SIZE:
            logger.error("%s: %s", self.plugin_name, _OVERFLOW_MESSAGE)
            self._buffer.clear()
            raise ValueError(_OVERFLOW_MESSAGE)
        self._buffer.extend(data)
        return len(data)

    def flush(self) -> None:
        """Log every complete line held in the buffer and drop it from the buffer.

        Nothing is consumed while the buffer is not valid UTF-8.
        """
        try:
            text = bytes(self._buffer).decode("utf-8")
        except UnicodeDecodeError:
            logger.error("Buffer conversion didn't work. This is unexpected")
            return
        if "\n" not in text:
            return

        consumed = 0
        *complete, last = text.split("\n")
        for message in complete:
            self._log_message(message)
            consumed += len(message.encode("utf-8")) + 1
        if text.endswith("\n") and last:
            self._log_message(last)
            consumed += len(last.encode("utf-8")) + 1
        del self._buffer[:consumed]

    def read(self, size: int = -1) -> bytes:
        """Always fails: the pipe is write-only."""
        message = f"Can not read {size} bytes from a LoggingPipe"
        logger.debug("%s: %s", self.plugin_name, message)
        raise OSError(errno.EBADF, message)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Always fails: a pipe has no position."""
        message = f"can not seek in a pipe (offset {offset}, whence {whence})"
        logger.debug("%s: %s", self.plugin_name, message)
        raise OSError(errno.ESPIPE, message)

    def size(self) -> int:
        return len(self._buffer)

    def set_len(self, length: int) -> None:
        """Truncate the buffer, or pad it with zero bytes, to ``length`` bytes."""
        if length < 0:
            raise ValueError(f"negative length: {length}")
        if length <= len(self._buffer):
            del self._buffer[length:]
        else:
            self._buffer.extend(bytes(length - len(self._buffer)))

    def unlink(self) -> None:
        """Mark the pipe as unlinked; it has no backing file to remove."""
        self.linked = False

    def bytes_available(self) -> int:
        return len(self._buffer)