"""In-process SSH server that stands in for a remote host in tests.

Example:

    options = ServerOptions(hostname="127.0.0.1", username="joebob", password="howdy!")
    shutdown = await start_server(options)
    try:
        results = await execute_with_password(
            f"127.0.0.1:{options.port}", "joebob", "howdy!", "hostname", 5
        )
    finally:
        await shutdown()
"""

import os
from collections.abc import Awaitable, Callable

import asyncssh

from sshclient.server.dispatcher import ChannelDispatcher, DispatchingServer
from sshclient.server.handlers import (
    BashHandler,
    ChannelIO,
    EchoHandler,
    HandlerError,
    MockHandler,
)
from sshclient.server.options import ServerOptions

Shutdown = Callable[[], Awaitable[None]]


def load_host_keys(options: ServerOptions) -> list[asyncssh.SSHKey]:
    """Load the configured host keys, generating one if none is configured.

    Raises:
        ValueError: If a configured key cannot be read or parsed
    """
    keys: list[asyncssh.SSHKey] = []

    if options.key_file:
        path = os.path.expanduser(options.key_file)
        try:
            keys.append(asyncssh.read_private_key(path))
        except (OSError, asyncssh.KeyImportError) as e:
            raise ValueError(f"failed to load private key ({path}): {e}") from e

    if options.key_bytes:
        try:
            keys.append(asyncssh.import_private_key(options.key_bytes))
        except asyncssh.KeyImportError as e:
            raise ValueError(f"failed to parse private key: {e}") from e

    if not keys:
        options.logger.info("No host key configured, generating an ephemeral one")
        keys.append(asyncssh.generate_private_key("ssh-ed25519"))

    return keys


async def start_server(options: ServerOptions) -> Shutdown:
    """Start listening and return an idempotent shutdown coroutine function.

    Args:
        options: Server configuration; ``options.port`` is updated with the
            port actually bound

    Returns:
        ``shutdown()`` which stops accepting and closes the listener

    Raises:
        ValueError: If a configured host key cannot be loaded
        OSError: If the listening socket cannot be bound
    """
    logger = options.logger
    host_keys = load_host_keys(options)

    try:
        acceptor = await asyncssh.create_server(
            lambda: DispatchingServer(options),
            options.hostname,
            options.port or 0,
            server_host_keys=host_keys,
            encoding=None,
            line_editor=False,
        )
    except OSError as e:
        logger.error("failed to listen on %s: %s", options.address, e)
        raise

    port = acceptor.get_port()
    if not port:
        # Listening on several addresses; report the first socket's port
        port = acceptor.sockets[0].getsockname()[1]
    options.port = port
    logger.info("Listening on %s...", options.address)

    closed = False

    async def shutdown() -> None:
        nonlocal closed
        if closed:
            return
        closed = True
        logger.info("closing listener")
        acceptor.close()
        await acceptor.wait_closed()

    return shutdown


__all__ = [
    "BashHandler",
    "ChannelDispatcher",
    "ChannelIO",
    "DispatchingServer",
    "EchoHandler",
    "HandlerError",
    "MockHandler",
    "ServerOptions",
    "Shutdown",
    "load_host_keys",
    "start_server",
]
