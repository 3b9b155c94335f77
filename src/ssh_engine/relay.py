"""Relay the initial command and local input lines to the remote shell."""

import asyncio
import enum
import logging
import os
import threading
from typing import IO, Awaitable, Callable, Optional, Union

import asyncssh

from .errors import RemoteWriteError

SENTINEL = b"quit"

READ_CHUNK_SIZE = 4096


class RelayState(enum.Enum):
    INIT = "init"
    COMMAND_SENT = "command-sent"
    RELAYING = "relaying"
    TERMINATED = "terminated"


class StdinLineReader:
    """Read raw lines from a file descriptor without stalling the event loop.

    A daemon thread reads one line per request with ``os.read`` and hands it
    to the loop. The thread holds no interpreter or buffered-file locks, so
    an interrupt ends the process even while it waits for input. Returns
    ``b""`` at end-of-stream.
    """

    def __init__(self, stream: Union[int, IO]):
        self._fd = stream if isinstance(stream, int) else stream.fileno()
        self._pending = b""
        self._requests = threading.Semaphore(0)
        self._queue: Optional[asyncio.Queue] = None
        self._eof = False

    def _next_line(self) -> bytes:
        while b"\n" not in self._pending:
            chunk = os.read(self._fd, READ_CHUNK_SIZE)
            if not chunk:
                line, self._pending = self._pending, b""
                return line
            self._pending += chunk
        line, _, self._pending = self._pending.partition(b"\n")
        return line + b"\n"

    def _pump(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        while True:
            self._requests.acquire()
            try:
                line = self._next_line()
            except OSError as e:
                line = e
            try:
                loop.call_soon_threadsafe(queue.put_nowait, line)
            except RuntimeError:
                # event loop already closed
                return
            if not line or isinstance(line, OSError):
                return

    def _start(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        thread = threading.Thread(
            target=self._pump,
            args=(asyncio.get_running_loop(), queue),
            name="stdin-reader",
            daemon=True,
        )
        thread.start()
        return queue

    async def __call__(self) -> bytes:
        if self._eof:
            return b""
        if self._queue is None:
            self._queue = self._start()
        self._requests.release()
        line = await self._queue.get()
        if isinstance(line, OSError):
            self._eof = True
            raise line
        if not line:
            self._eof = True
        return line


class RelayLoop:
    """Forward an initial command, then each local line, to the shell input.

    Lines are relayed as raw bytes, whatever their encoding. The loop stops
    after forwarding the sentinel line (exact, case-sensitive match) or when
    ``read_line`` signals end-of-stream with ``b""`` or ``None``. The remote
    shell decides what the sentinel means.
    """

    def __init__(
        self,
        writer: asyncssh.SSHWriter,
        read_line: Callable[[], Awaitable[Optional[bytes]]],
        remote_command: str,
        *,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
        sentinel: bytes = SENTINEL,
        encoding: str = "utf-8",
    ):
        self.writer = writer
        self.read_line = read_line
        self.remote_command = remote_command
        self.debug = debug
        self.logger = logger or logging.getLogger("ssh_engine")
        self.sentinel = sentinel
        self.encoding = encoding
        self.state = RelayState.INIT
        self.forwarded: list[bytes] = []

    async def _send(self, line: bytes) -> None:
        try:
            self.writer.write(line + b"\n")
            await self.writer.drain()
        except (OSError, asyncssh.Error) as e:
            self.state = RelayState.TERMINATED
            raise RemoteWriteError(f"Failed to write to the remote shell: {e}") from e
        self.forwarded.append(line)

    async def run(self) -> RelayState:
        """Run until the sentinel is forwarded or local input is exhausted."""
        await self._send(self.remote_command.encode(self.encoding, "surrogateescape"))
        self.state = RelayState.COMMAND_SENT

        self.state = RelayState.RELAYING
        while True:
            raw = await self.read_line()
            if not raw:
                break

            line = _strip_line_ending(raw)
            if self.debug:
                self.logger.debug(
                    "Input: %s", line.decode(self.encoding, "backslashreplace")
                )

            await self._send(line)
            if line == self.sentinel:
                if self.debug:
                    self.logger.debug("Quit sent")
                break

        self.state = RelayState.TERMINATED
        return self.state


def _strip_line_ending(line: bytes) -> bytes:
    """Drop one trailing newline (and a preceding carriage return)."""
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    return line
