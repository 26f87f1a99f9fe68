"""Command handlers for the in-process test server.

- EchoHandler: reports the command text back on stdout
- MockHandler: scripted exit code, stdout and stderr (optionally delayed)
- BashHandler: runs the command in a local ``bash`` through pipes
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import asyncssh

logger = logging.getLogger(__name__)


class HandlerError(Exception):
    """Handler failed; ``exit_code`` is still reported to the client."""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code
        super().__init__(message)


class ChannelIO:
    """The parts of a server channel a handler may use."""

    def __init__(self, chan: asyncssh.SSHServerChannel[bytes]) -> None:
        self._chan = chan
        self.stdin = asyncio.StreamReader()

    @staticmethod
    def _encode(data: str | bytes) -> bytes:
        return data.encode() if isinstance(data, str) else data

    def write(self, data: str | bytes) -> None:
        """Send data on the channel's stdout."""
        if data:
            self._chan.write(self._encode(data))

    def write_stderr(self, data: str | bytes) -> None:
        """Send data on the channel's stderr (extended data)."""
        if data:
            self._chan.write_stderr(self._encode(data))


class EchoHandler:
    """Writes ``command is: '<command>'`` and exits 0."""

    def __init__(self) -> None:
        self._io: ChannelIO | None = None

    def bind(self, io: ChannelIO) -> None:
        self._io = io

    async def execute(self, command: str) -> int:
        assert self._io is not None, "handler not bound to a channel"
        self._io.write(f"command is: {command!r}")
        return 0


@dataclass
class MockHandler:
    """Ignores the command and replays a scripted response."""

    rc: int = 0
    stdout: str = ""
    stderr: str = ""
    delay: float = 0.0
    _io: ChannelIO | None = field(default=None, init=False, repr=False)

    def bind(self, io: ChannelIO) -> None:
        self._io = io

    async def execute(self, command: str) -> int:
        assert self._io is not None, "handler not bound to a channel"
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        self._io.write(self.stdout)
        self._io.write_stderr(self.stderr)
        return self.rc


class BashHandler:
    """Runs each command with ``bash --noprofile --norc -c``.

    Client stdin is forwarded to the process; stdout and stderr are copied
    back to the channel as they arrive.
    """

    def __init__(self, shell: str = "bash") -> None:
        self.shell = shell
        self._io: ChannelIO | None = None

    def bind(self, io: ChannelIO) -> None:
        self._io = io

    async def execute(self, command: str) -> int:
        io = self._io
        assert io is not None, "handler not bound to a channel"

        try:
            proc = await asyncio.create_subprocess_exec(
                self.shell,
                "--noprofile",
                "--norc",
                "-c",
                command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise HandlerError(f"could not start {self.shell}: {e}", exit_code=127) from e

        assert proc.stdin and proc.stdout and proc.stderr
        feeder = asyncio.create_task(self._feed_stdin(io.stdin, proc.stdin))
        try:
            await asyncio.gather(
                self._pump(proc.stdout, io.write),
                self._pump(proc.stderr, io.write_stderr),
            )
            returncode = await proc.wait()
        finally:
            feeder.cancel()
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        logger.debug("%s is done (rc=%d)", self.shell, returncode)
        # Killed by a signal: report it the way a shell would
        return 128 - returncode if returncode < 0 else returncode

    @staticmethod
    async def _pump(reader: asyncio.StreamReader, write: Callable[[bytes], None]) -> None:
        while chunk := await reader.read(64 * 1024):
            write(chunk)

    @staticmethod
    async def _feed_stdin(source: asyncio.StreamReader, sink: asyncio.StreamWriter) -> None:
        try:
            while data := await source.read(64 * 1024):
                sink.write(data)
                await sink.drain()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("process stopped reading stdin")
        finally:
            sink.close()
