"""Test server configuration."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sshclient.protocols import CommandHandler
from sshclient.server.handlers import EchoHandler


@dataclass
class ServerOptions:
    """Configuration for the in-process test server.

    ``port`` may be left unset (or 0) to listen on an ephemeral port; the
    port actually bound is written back here by ``start_server``.
    Without a password no authentication method is offered, so every
    login is rejected.
    """

    hostname: str = "localhost"
    port: int | None = None
    username: str = ""
    password: str = ""
    key_file: str | None = None
    key_bytes: bytes | None = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("sshclient.server")
    )
    handler_factory: Callable[[], CommandHandler] = EchoHandler

    def __post_init__(self) -> None:
        """Validate option combinations.

        Raises:
            ValueError: If only one of username/password is set
        """
        if bool(self.username) != bool(self.password):
            raise ValueError("username and password must be configured together")

    @property
    def address(self) -> str:
        """host:port the server listens on (port 0 until started)."""
        return f"{self.hostname}:{self.port or 0}"
