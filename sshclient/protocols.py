"""Protocol interfaces for the test server's pluggable parts.

Usage Example:

    from sshclient.server import ServerOptions, start_server

    class UptimeHandler:
        def bind(self, io):
            self._io = io

        async def execute(self, command):
            self._io.write("up 3 days\\n")
            return 0

    shutdown = await start_server(ServerOptions(handler_factory=UptimeHandler))

Any object with these two methods works; no subclassing is required.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sshclient.server.handlers import ChannelIO


@runtime_checkable
class CommandHandler(Protocol):
    """Protocol for the command handler behind each exec request.

    The server creates one handler per channel, binds it to the channel's
    streams, then calls ``execute`` once with the requested command.
    """

    def bind(self, io: "ChannelIO") -> None:
        """Attach the channel streams the handler writes output to.

        Args:
            io: stdout/stderr writers plus a reader for client stdin
        """
        ...

    async def execute(self, command: str) -> int:
        """Run ``command`` and return its exit code.

        Args:
            command: Command string from the exec request

        Returns:
            Exit code reported to the client through exit-status

        Raises:
            HandlerError: To fail the request with a specific exit code
        """
        ...


__all__ = ["CommandHandler"]
