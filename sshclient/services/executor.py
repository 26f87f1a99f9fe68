"""Timeout-bounded command execution.

A command runs in a worker task that races a deadline. Whichever finishes
first decides the outcome, so the caller sees either Results or
CommandTimeoutError, never both.

A timed-out worker is abandoned, not cancelled: asyncssh offers no way to
stop a remote command mid-flight, so the command may keep running on the
remote host. Closing the session (or its connection) is the only way to
reclaim the channel. The abandoned task's late result is drained so it is
never reported or left pending.
"""

import asyncio
import logging
from typing import Any

import asyncssh

from sshclient.config import Settings
from sshclient.errors import CommandTimeoutError, ConnectionError
from sshclient.models import Results, Target
from sshclient.services.connection import Connection
from sshclient.services.session import Session
from sshclient.utils.hostname import split_host_port

logger = logging.getLogger(__name__)

# Keeps abandoned workers referenced until they finish
_abandoned: set[asyncio.Task[Results]] = set()


def _drain_abandoned(task: "asyncio.Task[Results]") -> None:
    """Consume the late outcome of an abandoned worker."""
    _abandoned.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("Abandoned command finished with error: %s", error)
    else:
        logger.debug(
            "Abandoned command finished late (exit=%d)", task.result().exit_code
        )


def _abandon(task: "asyncio.Task[Results]") -> None:
    _abandoned.add(task)
    task.add_done_callback(_drain_abandoned)


async def run_with_timeout(
    session: Session,
    command: str,
    timeout: float | None,
    *,
    check: bool = False,
) -> Results:
    """Run ``command`` on ``session``, giving up after ``timeout`` seconds.

    Args:
        session: Session to run on (must not be running anything else)
        command: Command to execute remotely
        timeout: Deadline in seconds; None or <= 0 waits indefinitely
        check: Raise CommandError when the command fails

    Returns:
        Results of the command

    Raises:
        CommandTimeoutError: If the deadline elapsed first. The remote
            command may still be running; close the session to reclaim it.
        CommandError: If ``check`` and the command exited non-zero
        ConnectionError: If the channel could not be opened or was lost
    """
    deadline = timeout if timeout is not None and timeout > 0 else None
    worker = asyncio.create_task(session.run(command))

    try:
        done, _ = await asyncio.wait({worker}, timeout=deadline)
    except asyncio.CancelledError:
        _abandon(worker)
        raise

    if worker not in done:
        logger.warning(
            "Command %r timed out after %ss on %s; abandoning worker",
            command,
            timeout,
            session.connection.address,
        )
        _abandon(worker)
        raise CommandTimeoutError(command, deadline)

    results = worker.result()
    return results.check() if check else results


async def _execute(
    host: str,
    user: str,
    command: str,
    timeout: float | None,
    *,
    check: bool,
    settings: Settings | None,
    **auth: Any,
) -> Results:
    """Dial, open an owning session with a terminal, and run one command."""
    settings = settings or Settings()
    if timeout is None:
        timeout = settings.command_timeout

    hostname, port = split_host_port(host)
    try:
        known_hosts = settings.known_hosts_path
    except OSError as e:
        address = Target(hostname=hostname, username=user, port=port).address
        logger.error("Cannot verify host keys for %s: %s", address, e)
        raise ConnectionError(address, e) from e

    connection = await Connection.dial(
        hostname,
        user,
        port=port,
        known_hosts=known_hosts,
        connect_timeout=settings.connect_timeout,
        **auth,
    )

    async with Session.open(connection, owns_connection=True) as session:
        terminal = settings.terminal
        await session.request_terminal(
            terminal.width,
            terminal.height,
            terminal.modes,
            term_type=terminal.term_type,
        )
        session.buffer()
        return await run_with_timeout(session, command, timeout, check=check)


async def execute_with_password(
    host: str,
    user: str,
    password: str,
    command: str,
    timeout: float | None = None,
    *,
    check: bool = False,
    settings: Settings | None = None,
) -> Results:
    """Run one command on ``host`` ("name[:port]") using password auth.

    Args:
        host: Host, optionally with ":port"
        user: Username
        password: Password
        command: Command to run
        timeout: Seconds to wait (None: settings.command_timeout, <= 0: forever)
        check: Raise CommandError on non-zero exit
        settings: Client settings (default: Settings())

    Returns:
        Results of the command

    Raises:
        ConnectionError: If dialing fails or the known_hosts file required
            by strict host key checking is missing
    """
    return await _execute(
        host,
        user,
        command,
        timeout,
        check=check,
        settings=settings,
        password=password,
        client_keys=None,
        agent_path=None,
    )


async def execute_with_key(
    host: str,
    user: str,
    private_key: str | bytes | asyncssh.SSHKey,
    command: str,
    timeout: float | None = None,
    *,
    passphrase: str | None = None,
    check: bool = False,
    settings: Settings | None = None,
) -> Results:
    """Run one command on ``host`` using public key auth.

    Args:
        private_key: Key data (OpenSSH/PEM) or an already loaded SSHKey
        passphrase: Passphrase for encrypted key data

    Raises:
        asyncssh.KeyImportError: If the key data cannot be parsed
    """
    if isinstance(private_key, asyncssh.SSHKey):
        key = private_key
    else:
        key = asyncssh.import_private_key(private_key, passphrase)

    return await _execute(
        host,
        user,
        command,
        timeout,
        check=check,
        settings=settings,
        client_keys=[key],
        agent_path=None,
    )


async def execute_with_agent(
    host: str,
    user: str,
    command: str,
    timeout: float | None = None,
    *,
    agent_path: str | None = None,
    check: bool = False,
    settings: Settings | None = None,
) -> Results:
    """Run one command on ``host`` authenticating through ssh-agent.

    Args:
        agent_path: Agent socket (default: $SSH_AUTH_SOCK)
    """
    auth: dict[str, Any] = {}
    if agent_path:
        auth["agent_path"] = agent_path

    return await _execute(
        host, user, command, timeout, check=check, settings=settings, **auth
    )
