"""SSH connection and interactive shell session using asyncssh."""

import asyncio
from typing import BinaryIO, Optional

import asyncssh
from asyncssh.constants import OPEN_REQUEST_SESSION_FAILED

from .config import Configuration
from .errors import AuthenticationError, ConnectError, SessionError, ShellStartError

COPY_CHUNK_SIZE = 4096

MAX_PORT = 65535

# Seconds to let remote output drain after the relay loop ends.
OUTPUT_GRACE_PERIOD = 1.0


class Session:
    """One remote shell channel.

    ``stdin`` is the write-only input stream of the shell. Remote stdout and
    stderr are copied to local sinks by background tasks started with
    :meth:`mirror`.
    """

    def __init__(self, process: asyncssh.SSHClientProcess):
        self._process = process
        self._copiers: list[asyncio.Task] = []

    @property
    def stdin(self) -> asyncssh.SSHWriter:
        return self._process.stdin

    def mirror(self, stdout: BinaryIO, stderr: BinaryIO) -> None:
        """Start copying remote output to *stdout* and *stderr* verbatim."""
        self._copiers = [
            asyncio.create_task(_copy_output(self._process.stdout, stdout)),
            asyncio.create_task(_copy_output(self._process.stderr, stderr)),
        ]

    async def close(self, grace_period: float = OUTPUT_GRACE_PERIOD) -> None:
        """Close the channel, giving pending output a moment to arrive."""
        if self._copiers:
            _, pending = await asyncio.wait(self._copiers, timeout=grace_period)
            for task in pending:
                task.cancel()
            await asyncio.gather(*self._copiers, return_exceptions=True)
            self._copiers = []
        self._process.close()
        await self._process.wait_closed()


async def _copy_output(reader: asyncssh.SSHReader, sink: BinaryIO) -> None:
    while True:
        data = await reader.read(COPY_CHUNK_SIZE)
        if not data:
            break
        sink.write(data)
        sink.flush()


class SessionTransport:
    """Authenticated SSH connection hosting a single shell session.

    Use as an async context manager; leaving the block closes the session
    and the connection.
    """

    def __init__(self, config: Configuration, signer: asyncssh.SSHKey):
        self.config = config
        self.signer = signer
        self._conn: Optional[asyncssh.SSHClientConnection] = None
        self._session: Optional[Session] = None

    def _connect_kwargs(self) -> dict:
        try:
            port = int(self.config.port)
        except ValueError:
            raise ConnectError(
                f"Could not connect to SSH (failed to dial): invalid port "
                f"{self.config.port!r}"
            ) from None
        if not 0 < port <= MAX_PORT:
            raise ConnectError(
                f"Could not connect to SSH (failed to dial): port {port} is out of range"
            )

        connect_kwargs: dict = {
            "host": self.config.host,
            "port": port,
            "username": self.config.user,
            "client_keys": [self.signer],
        }

        if self.config.insecure_ignore_host_key:
            connect_kwargs["known_hosts"] = None
        elif self.config.known_hosts_file:
            connect_kwargs["known_hosts"] = self.config.known_hosts_file

        return connect_kwargs

    async def connect(self) -> None:
        """Dial the configured address and authenticate with the signer."""
        if self._conn is not None:
            return

        connect_kwargs = self._connect_kwargs()
        try:
            self._conn = await asyncssh.connect(**connect_kwargs)
        except asyncssh.PermissionDenied as e:
            raise AuthenticationError(
                f"Could not connect to SSH (authentication failed for "
                f"{self.config.user}@{self.config.address}): {e}"
            ) from e
        except (asyncssh.Error, OSError) as e:
            raise ConnectError(f"Could not connect to SSH (failed to dial): {e}") from e

    async def open_shell(self) -> Session:
        """Open the interactive shell channel."""
        if self._conn is None:
            await self.connect()

        try:
            # No command means a shell request; no encoding means raw bytes.
            process = await self._conn.create_process(encoding=None)
        except asyncssh.ChannelOpenError as e:
            if e.code == OPEN_REQUEST_SESSION_FAILED:
                raise ShellStartError(f"Failed to start shell: {e.reason}") from e
            raise SessionError(f"Failed to create SSH session: {e.reason}") from e
        except (asyncssh.Error, OSError) as e:
            raise SessionError(f"Failed to create SSH session: {e}") from e

        self._session = Session(process)
        return self._session

    async def close(self) -> None:
        """Close the session, then the connection."""
        if self._session is not None:
            session, self._session = self._session, None
            await session.close()
        if self._conn is not None:
            conn, self._conn = self._conn, None
            conn.close()
            await conn.wait_closed()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
