"""Authenticated SSH connection owned by the code that dialed it."""

import logging
from typing import TYPE_CHECKING, Any

import asyncssh

from sshclient.errors import ConnectionError
from sshclient.models import Target

if TYPE_CHECKING:
    from sshclient.services.session import Session

logger = logging.getLogger(__name__)


class Connection:
    """One authenticated asyncssh client connection.

    Closed exactly once; further ``close()`` calls are no-ops.
    """

    def __init__(self, conn: asyncssh.SSHClientConnection, target: Target) -> None:
        """Wrap an already established connection.

        Args:
            conn: Connected asyncssh client connection
            target: Host, port and user the connection was made to
        """
        self._conn = conn
        self.target = target
        self._closed = False

    @classmethod
    async def dial(
        cls,
        hostname: str,
        username: str,
        *,
        port: int = 22,
        known_hosts: str | None = None,
        connect_timeout: float | None = None,
        **auth: Any,
    ) -> "Connection":
        """Dial, handshake and authenticate.

        Args:
            hostname: Host to connect to
            username: User to authenticate as
            port: TCP port
            known_hosts: known_hosts path, or None to skip host key verification
            connect_timeout: Seconds allowed for dial plus handshake
            **auth: asyncssh auth options (password, client_keys, agent_path)

        Returns:
            Connected Connection

        Raises:
            ConnectionError: If dial, handshake or authentication fails
        """
        target = Target(hostname=hostname, username=username, port=port)
        if known_hosts is None:
            logger.warning(
                "SSH host key verification disabled for %s", target.address
            )

        options: dict[str, Any] = {
            "port": port,
            "username": username,
            "known_hosts": known_hosts,
        }
        if connect_timeout:
            options["connect_timeout"] = connect_timeout
        options.update(auth)

        logger.info("Opening SSH connection to %s@%s", username, target.address)
        try:
            conn = await asyncssh.connect(hostname, **options)
        except (OSError, asyncssh.Error) as e:
            logger.error("Connection to %s failed: %s", target.address, e)
            raise ConnectionError(target.address, e) from e

        logger.info("SSH connection established to %s", target.address)
        return cls(conn, target)

    @property
    def address(self) -> str:
        """host:port this connection points at."""
        return self.target.address

    @property
    def is_closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    @property
    def transport(self) -> asyncssh.SSHClientConnection:
        """Underlying asyncssh connection.

        Raises:
            ConnectionError: If the connection has been closed
        """
        if self._closed:
            raise ConnectionError(self.address, "connection is closed")
        return self._conn

    def open_session(self) -> "Session":
        """Open a Session on this connection (the session does not own it)."""
        from sshclient.services.session import Session

        return Session.open(self)

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logger.info("Closing SSH connection to %s", self.address)
        self._conn.close()
        await self._conn.wait_closed()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
