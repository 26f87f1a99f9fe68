"""Per-connection and per-channel request handling for the test server.

asyncssh performs the handshake, rejects global requests and decodes
channel requests; the classes here decide what each request means:

- ``pty-req``/``window-change``: accepted, no terminal is allocated
- ``shell``: accepted; the channel exits 0 once the client sends EOF
- ``exec``: the command runs on the channel's CommandHandler, whose exit
  code is sent back as ``exit-status`` before the channel is closed
- anything else: logged as unhandled and acknowledged
"""

import asyncio
import logging

import asyncssh

from sshclient.protocols import CommandHandler
from sshclient.server.handlers import ChannelIO, HandlerError
from sshclient.server.options import ServerOptions

# Exit code reported when a handler raises something other than HandlerError
HANDLER_CRASH_EXIT_CODE = 255


class ChannelDispatcher(asyncssh.SSHServerSession[bytes]):
    """Request state machine for one "session" channel."""

    def __init__(self, handler: CommandHandler, logger: logging.Logger) -> None:
        self._handler = handler
        self._logger = logger
        self._chan: asyncssh.SSHServerChannel[bytes] | None = None
        self._io: ChannelIO | None = None
        self._command: str | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def command(self) -> str | None:
        """Command from the exec request, if one was received."""
        return self._command

    def connection_made(self, chan: asyncssh.SSHServerChannel[bytes]) -> None:
        self._chan = chan
        self._io = ChannelIO(chan)
        self._handler.bind(self._io)

    def pty_requested(
        self,
        term_type: str | None,
        term_size: tuple[int, int, int, int],
        term_modes: dict[int, int],
    ) -> bool:
        self._logger.debug(
            "pty-req accepted without allocation (%s %dx%d)",
            term_type,
            term_size[0],
            term_size[1],
        )
        return True

    def terminal_size_changed(
        self, width: int, height: int, pixwidth: int, pixheight: int
    ) -> None:
        self._logger.debug("window-change ignored (%dx%d)", width, height)

    def shell_requested(self) -> bool:
        self._logger.debug("shell request accepted")
        return True

    def exec_requested(self, command: str) -> bool:
        self._logger.info("exec command: %s", command)
        self._command = command
        return True

    def subsystem_requested(self, subsystem: str) -> bool:
        self._logger.info("unhandled request type: subsystem (%s)", subsystem)
        return True

    def break_received(self, msec: int) -> bool:
        self._logger.info("unhandled request type: break")
        return True

    def signal_received(self, signal: str) -> None:
        self._logger.info("unhandled request type: signal (%s)", signal)

    def session_started(self) -> None:
        if self._command is not None:
            self._task = asyncio.create_task(self._run(self._command))

    def data_received(self, data: bytes, datatype: int | None) -> None:
        if self._io is not None:
            self._io.stdin.feed_data(data)

    def eof_received(self) -> bool:
        if self._io is not None:
            self._io.stdin.feed_eof()
        if self._command is None and self._chan is not None:
            self._chan.exit(0)
        # Stay half-open so a running handler can still write output
        return True

    def connection_lost(self, exc: Exception | None) -> None:
        if self._task is not None and not self._task.done():
            self._logger.debug("channel lost, cancelling handler")
            self._task.cancel()
        if exc is not None:
            self._logger.error("session channel error: %s", exc)
        self._logger.debug("end of session requests")

    async def _run(self, command: str) -> None:
        """Run the handler and report its exit code as exit-status."""
        try:
            rc = await self._handler.execute(command)
        except HandlerError as e:
            self._logger.error("handler exec error: %s", e)
            rc = e.exit_code
        except Exception:
            self._logger.exception("handler exec error")
            rc = HANDLER_CRASH_EXIT_CODE

        self._logger.debug("exec rc: %d", rc)
        assert self._chan is not None
        try:
            self._chan.exit(rc)
        except OSError as e:
            self._logger.warning("could not send exit-status: %s", e)


class DispatchingServer(asyncssh.SSHServer):
    """Per-connection callbacks: authentication and channel dispatch."""

    def __init__(self, options: ServerOptions) -> None:
        self._options = options
        self._logger = options.logger

    def connection_made(self, conn: asyncssh.SSHServerConnection) -> None:
        self._logger.info(
            "New SSH connection from %s (%s)",
            conn.get_extra_info("peername"),
            conn.get_extra_info("client_version"),
        )

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            self._logger.error("SSH connection failed: %s", exc)
        else:
            self._logger.info("SSH connection closed")

    def begin_auth(self, username: str) -> bool:
        return True

    def password_auth_supported(self) -> bool:
        return bool(self._options.password)

    def validate_password(self, username: str, password: str) -> bool:
        # Plain string comparison: fine for a test double, NOT constant-time
        if username == self._options.username and password == self._options.password:
            return True
        self._logger.warning("password rejected for %r", username)
        return False

    def session_requested(self) -> ChannelDispatcher:
        return ChannelDispatcher(self._options.handler_factory(), self._logger)

    def connection_requested(
        self, dest_host: str, dest_port: int, orig_host: str, orig_port: int
    ) -> bool:
        return self._reject_channel("direct-tcpip")

    def unix_connection_requested(self, dest_path: str) -> bool:
        return self._reject_channel("direct-streamlocal@openssh.com")

    def _reject_channel(self, chantype: str) -> bool:
        self._logger.info("rejecting channel: unknown channel type: %s", chantype)
        raise asyncssh.ChannelOpenError(
            asyncssh.OPEN_UNKNOWN_CHANNEL_TYPE, f"unknown channel type: {chantype}"
        )
