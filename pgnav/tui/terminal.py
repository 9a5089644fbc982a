"""Terminal driver: keystrokes, window size and raw output.

The selector only talks to the :class:`Terminal` protocol so it can be driven
by a scripted fake in tests; :class:`PosixTerminal` is the real thing.
"""
from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty
from contextlib import contextmanager
from typing import IO, Iterator, Protocol

import readchar

from ..context import Context
from ..errors import CancelError, SelectorIOError

# Cursor up one line, clear that line, back to column 0.
ERASE_PREV_LINE = "\x1b[F\x1b[2K\r"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

# Follow-up bytes of an escape sequence arrive together; a lone ESC does not.
_ESCAPE_GRACE = 0.03


def terminal_size(fd: int | None = None) -> tuple[int, int]:
    """Return ``(columns, rows)`` of the terminal attached to *fd*.

    Raises:
        SelectorIOError: when the size cannot be queried (not a tty, closed fd).
    """
    if fd is None:
        fd = sys.stdout.fileno()
    try:
        size = os.get_terminal_size(fd)
    except (OSError, ValueError) as e:
        raise SelectorIOError(f"cannot read terminal size: {e}") from e
    return size.columns, size.lines


class Terminal(Protocol):
    def read_key(self, ctx: Context) -> str: ...

    def size(self) -> tuple[int, int]: ...

    def write(self, text: str) -> None: ...

    def session(self): ...


class PosixTerminal:
    """Terminal driver over the process' stdin/stdout."""

    def __init__(
        self,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
        poll_interval: float = 0.1,
    ):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.poll_interval = poll_interval

    def size(self) -> tuple[int, int]:
        try:
            fd = self.stdout.fileno()
        except (OSError, ValueError) as e:
            raise SelectorIOError(f"cannot read terminal size: {e}") from e
        return terminal_size(fd)

    def write(self, text: str) -> None:
        try:
            self.stdout.write(text)
            self.stdout.flush()
        except (OSError, ValueError) as e:
            raise SelectorIOError(f"terminal write failed: {e}") from e

    @contextmanager
    def session(self) -> Iterator[PosixTerminal]:
        """Put the terminal in cbreak mode with a hidden cursor."""
        try:
            fd = self.stdin.fileno()
            saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except (OSError, ValueError, termios.error) as e:
            raise SelectorIOError(f"cannot configure terminal: {e}") from e
        self.write(HIDE_CURSOR)
        try:
            yield self
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            self.write(SHOW_CURSOR)

    def _fd(self) -> int:
        try:
            return self.stdin.fileno()
        except (OSError, ValueError) as e:
            raise SelectorIOError(f"terminal read failed: {e}") from e

    def _ready(self, fd: int, timeout: float) -> bool:
        try:
            ready, _, _ = select.select([fd], [], [], timeout)
        except (OSError, ValueError) as e:
            raise SelectorIOError(f"terminal read failed: {e}") from e
        return bool(ready)

    def _read_byte(self, fd: int) -> bytes:
        try:
            data = os.read(fd, 1)
        except OSError as e:
            raise SelectorIOError(f"terminal read failed: {e}") from e
        if not data:
            raise SelectorIOError("terminal read failed: end of input")
        return data

    def read_key(self, ctx: Context) -> str:
        """Block for one keystroke, returning it as a ``readchar.key`` string.

        Polls every ``poll_interval`` seconds so a cancelled *ctx* is
        noticed promptly. Bytes come straight from the descriptor that
        ``select`` watches, never through a buffered reader.

        Raises:
            CancelError: when *ctx* is cancelled while waiting.
            SelectorIOError: when stdin cannot be read.
        """
        try:
            return self._read_key(ctx)
        except KeyboardInterrupt:
            raise CancelError() from None

    def _read_key(self, ctx: Context) -> str:
        fd = self._fd()
        while not self._ready(fd, self.poll_interval):
            ctx.raise_if_cancelled()
        ctx.raise_if_cancelled()

        data = self._read_byte(fd)
        if data == readchar.key.ESC.encode():
            while self._ready(fd, _ESCAPE_GRACE):
                data += self._read_byte(fd)
                # CSI and SS3 sequences end with a letter or "~".
                last = data[-1:]
                if len(data) > 2 and (last.isalpha() or last == b"~"):
                    break
            return data.decode("ascii", errors="replace")

        decoder = codecs.getincrementaldecoder(_encoding(self.stdin))(errors="replace")
        key = decoder.decode(data)
        # Multi-byte characters arrive in one burst.
        while not key and self._ready(fd, _ESCAPE_GRACE):
            key = decoder.decode(self._read_byte(fd))
        return key or decoder.decode(b"", final=True)


def _encoding(stream) -> str:
    return getattr(stream, "encoding", None) or "utf-8"
