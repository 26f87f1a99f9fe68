"""SSH session: command execution and file transfer over logical channels.

asyncssh sends the pty, exec and subsystem requests while opening a
channel, so a Session records the terminal request and applies it to the
channel opened by the next ``run()`` or ``copy()``.

Output from the remote side reaches the session buffers only after
``buffer()`` has been called. The buffers are written by the channel's
receive callbacks and must only be read once the command has finished.
"""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import asyncssh

from sshclient.errors import ConnectionError, TerminalError
from sshclient.models import Results, TerminalSettings

if TYPE_CHECKING:
    from sshclient.services.connection import Connection

logger = logging.getLogger(__name__)


class _ChannelSession(asyncssh.SSHClientSession[bytes]):
    """asyncssh callbacks for one logical channel."""

    def __init__(self, session: "Session", capture: bool) -> None:
        self._session = session
        self.stdout = bytearray() if capture else None
        self.stderr = bytearray() if capture else None
        self.closed = False
        self.error: Exception | None = None
        self._writable = asyncio.Event()
        self._writable.set()

    def data_received(self, data: bytes, datatype: int | None) -> None:
        is_stderr = datatype == asyncssh.EXTENDED_DATA_STDERR
        if self.stdout is not None and self.stderr is not None:
            (self.stderr if is_stderr else self.stdout).extend(data)
        else:
            self._session._collect(data, is_stderr)

    def pause_writing(self) -> None:
        self._writable.clear()

    def resume_writing(self) -> None:
        self._writable.set()

    def connection_lost(self, exc: Exception | None) -> None:
        self.closed = True
        self.error = exc
        self._writable.set()
        self._session._channel_finished()

    async def drain(self) -> None:
        await self._writable.wait()
        if self.error is not None:
            raise self.error
        if self.closed:
            raise BrokenPipeError("Channel closed by remote side")


class Channel:
    """One logical channel opened by a Session."""

    def __init__(
        self,
        chan: asyncssh.SSHClientChannel[bytes],
        callbacks: _ChannelSession,
        command: str,
    ) -> None:
        self._chan = chan
        self._callbacks = callbacks
        self.command = command

    @property
    def closed(self) -> bool:
        return self._callbacks.closed

    @property
    def error(self) -> Exception | None:
        """Exception the channel was lost with, if any."""
        return self._callbacks.error

    @property
    def stdout(self) -> bytes:
        """Output captured on this channel alone (capture=True only)."""
        return bytes(self._callbacks.stdout or b"")

    @property
    def stderr(self) -> bytes:
        return bytes(self._callbacks.stderr or b"")

    @property
    def exit_status(self) -> int:
        """Remote exit status, 0 when none was reported."""
        status = self._chan.get_exit_status()
        if status is None or status < 0:
            return 0
        return status

    @property
    def exit_signal(self) -> str | None:
        signal = self._chan.get_exit_signal()
        return signal[0] if signal else None

    async def write(self, data: bytes) -> None:
        """Write to the remote stdin, waiting for flow control.

        Raises:
            OSError: If the channel is closed or was lost
            asyncssh.Error: If the connection failed
        """
        self._chan.write(data)
        await self._callbacks.drain()

    def write_eof(self) -> None:
        """Close the write side of the channel."""
        self._chan.write_eof()

    def close(self) -> None:
        self._chan.close()

    async def wait_closed(self) -> None:
        await self._chan.wait_closed()


class Session:
    """Command execution and transfer bound to one Connection.

    Run and copy calls must be serialized: a second call while a channel is
    still open raises RuntimeError.
    """

    def __init__(self, connection: "Connection", owns_connection: bool = False) -> None:
        self._connection = connection
        self.owns_connection = owns_connection
        self._stdout = bytearray()
        self._stderr = bytearray()
        self._buffered = False
        self._terminal: TerminalSettings | None = None
        self._channel: Channel | None = None
        self._busy = False
        self._closed = False

    @classmethod
    def open(cls, connection: "Connection", owns_connection: bool = False) -> "Session":
        """Bind a new session to a connection.

        Args:
            connection: Authenticated connection
            owns_connection: Close the connection when the session closes

        Raises:
            ConnectionError: If the connection is already closed
        """
        if connection.is_closed:
            raise ConnectionError(connection.address, "connection is closed")
        return cls(connection, owns_connection=owns_connection)

    @property
    def connection(self) -> "Connection":
        return self._connection

    @property
    def terminal(self) -> TerminalSettings | None:
        return self._terminal

    @property
    def stdout(self) -> bytes:
        """Captured standard output."""
        return bytes(self._stdout)

    @property
    def stderr(self) -> bytes:
        """Captured standard error."""
        return bytes(self._stderr)

    async def request_terminal(
        self,
        width: int,
        height: int,
        modes: dict[int, int] | None = None,
        term_type: str = "xterm",
    ) -> None:
        """Request a pseudo-terminal for the channels this session opens.

        Args:
            width: Terminal width in characters
            height: Terminal height in rows
            modes: PTY mode opcodes to values (default: echo off, 14400 baud)
            term_type: TERM value sent to the remote side

        Raises:
            TerminalError: If the geometry is invalid (the connection is closed)
        """
        if self._closed:
            raise ConnectionError(self._connection.address, "session is closed")
        if width <= 0 or height <= 0:
            await self._connection.close()
            raise TerminalError(
                f"Request for pseudo terminal failed: invalid size {width}x{height}"
            )

        settings = TerminalSettings(term_type=term_type, width=width, height=height)
        if modes is not None:
            settings.modes = dict(modes)
        self._terminal = settings
        logger.debug("Terminal requested: %s %dx%d", term_type, width, height)

    def buffer(self) -> None:
        """Capture remote stdout/stderr into this session's buffers."""
        self._buffered = True

    def clear(self) -> None:
        """Empty both capture buffers, keeping the session open."""
        self._stdout.clear()
        self._stderr.clear()

    def _collect(self, data: bytes, is_stderr: bool) -> None:
        if self._buffered:
            (self._stderr if is_stderr else self._stdout).extend(data)

    def _channel_finished(self) -> None:
        self._busy = False

    async def open_channel(self, command: str, capture: bool = False) -> Channel:
        """Open a logical channel and start ``command`` on it.

        Args:
            command: Command sent in the exec request
            capture: Keep this channel's output on the Channel itself instead
                of the session buffers

        Returns:
            Open Channel

        Raises:
            RuntimeError: If another channel on this session is still open
            TerminalError: If the remote side refused the pseudo-terminal
            ConnectionError: If the channel could not be opened
        """
        if self._closed:
            raise ConnectionError(self._connection.address, "session is closed")
        if self._busy:
            raise RuntimeError("Session is busy; wait for the previous command to finish")

        options: dict[str, Any] = {"encoding": None}
        if self._terminal is not None:
            options.update(
                term_type=self._terminal.term_type,
                term_size=self._terminal.size,
                term_modes=self._terminal.modes,
            )

        self._busy = True
        opened = False
        try:
            chan, callbacks = await self._connection.transport.create_session(
                lambda: _ChannelSession(self, capture), command, **options
            )
            opened = True
        except asyncssh.ChannelOpenError as e:
            if e.code == asyncssh.OPEN_REQUEST_PTY_FAILED:
                await self._connection.close()
                raise TerminalError(
                    f"Request for pseudo terminal failed: {e.reason}"
                ) from e
            raise ConnectionError(self._connection.address, e) from e
        except (OSError, asyncssh.Error) as e:
            raise ConnectionError(self._connection.address, e) from e
        finally:
            if not opened:
                self._busy = False

        self._channel = Channel(chan, callbacks, command)
        return self._channel

    async def run(self, command: str) -> Results:
        """Run one command and wait for the remote side to finish.

        Returns:
            Results with exit code (0 if none was reported) and the
            buffered output

        Raises:
            ConnectionError: If the channel could not be opened or was lost
        """
        logger.debug("Running %r on %s", command, self._connection.address)
        channel = await self.open_channel(command)
        channel.write_eof()
        await channel.wait_closed()

        if channel.error is not None:
            raise ConnectionError(self._connection.address, channel.error)

        results = Results(
            exit_code=channel.exit_status,
            stdout=self._stdout.decode("utf-8", errors="replace"),
            stderr=self._stderr.decode("utf-8", errors="replace"),
            exit_signal=channel.exit_signal,
        )
        logger.debug(
            "Command %r on %s finished (exit=%d)",
            command,
            self._connection.address,
            results.exit_code,
        )
        return results

    async def copy(
        self,
        local_path: str | Path,
        remote_destination: str,
        mode: int | None = None,
    ) -> int:
        """Push one local file to the remote host with SCP.

        The sink's status replies stay on the transfer channel and never
        reach the session buffers.

        Returns:
            Number of file bytes sent
        """
        from sshclient.services.scp import copy_file

        return await copy_file(self, local_path, remote_destination, mode=mode)

    async def close(self) -> None:
        """Close the open channel, then the connection if owned.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True

        channel = self._channel
        if channel is not None and not channel.closed:
            channel.close()

        if self.owns_connection:
            await self._connection.close()
        elif channel is not None:
            await channel.wait_closed()

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
