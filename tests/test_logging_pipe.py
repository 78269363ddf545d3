import io
import logging

import pytest

from paneserve.logging_pipe import MAX_PIPE_BUFFER_SIZE, LoggingPipe


def test_write_without_endl_does_not_consume_buffer_after_flush():
    pipe = LoggingPipe("TestPipe", 0)
    data = b"Testing write"
    assert pipe.write(data) == len(data)
    pipe.flush()
    assert pipe.size() == len(data)


def test_write_with_single_endl_at_the_end_consumes_whole_buffer_after_flush():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"Testing write \n")
    pipe.flush()
    assert pipe.size() == 0


def test_write_with_endl_in_the_middle_consumes_buffer_up_to_endl_after_flush():
    pipe = LoggingPipe("TestPipe", 0)
    line = b"Testing write \n"
    rest = b"And the rest"
    pipe.write(line * 4 + rest)
    pipe.flush()
    assert pipe.size() == len(rest)


def test_write_with_many_endl_consumes_whole_buffer_after_flush():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"Testing write \n" * 5)
    pipe.flush()
    assert pipe.size() == 0


def test_write_with_incorrect_byte_boundary_does_not_crash():
    pipe = LoggingPipe("TestPipe", 0)
    data = "😱".encode("utf-8")
    with pytest.raises(UnicodeDecodeError):
        data[:-1].decode("utf-8")
    pipe.write(data[:-1])
    pipe.flush()
    assert pipe.size() == len(data) - 1


def test_write_with_many_endls_consumes_everything_after_flush():
    pipe = LoggingPipe("TestPipe", 0)
    line = b"Testing write \n"
    pipe.write(line + line + b"\n" + b"\n" + b"\n")
    pipe.flush()
    assert pipe.size() == 0


def test_flush_logs_each_line(caplog):
    pipe = LoggingPipe("TestPipe", 3)
    pipe.write(b"first\nsecond\npartial")
    with caplog.at_level(logging.DEBUG, logger="paneserve.logging_pipe"):
        pipe.flush()
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 2
    assert messages[0].endswith(" first")
    assert messages[1].endswith(" second")
    assert messages[0].startswith("|TestPipe")
    assert "id: 3" in messages[0]
    assert pipe.size() == len(b"partial")


def test_completing_partial_line_later_consumes_it():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"abc")
    pipe.flush()
    pipe.write(b"def\n")
    pipe.flush()
    assert pipe.size() == 0


def test_buffer_limit_is_inclusive_and_overflow_clears():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"x" * MAX_PIPE_BUFFER_SIZE)
    assert pipe.size() == MAX_PIPE_BUFFER_SIZE
    with pytest.raises(ValueError):
        pipe.write(b"y")
    assert pipe.size() == 0


def test_set_len_truncates_and_pads():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"hello")
    pipe.set_len(2)
    assert pipe.bytes_available() == 2
    pipe.set_len(6)
    assert pipe.size() == 6
    pipe.write(b"\n")
    pipe.flush()
    # the zero padding is valid UTF-8, so the whole line is consumed
    assert pipe.size() == 0


def test_set_len_rejects_negative():
    pipe = LoggingPipe("TestPipe", 0)
    with pytest.raises(ValueError):
        pipe.set_len(-1)


def test_unlink_keeps_buffer():
    pipe = LoggingPipe("TestPipe", 0)
    pipe.write(b"abc")
    pipe.unlink()
    assert pipe.bytes_available() == 3