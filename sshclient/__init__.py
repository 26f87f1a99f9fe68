"""sshclient: run remote commands over SSH with a deadline and push files with SCP.

An in-process SSH server (``sshclient.server``) stands in for remote hosts
in tests.
"""

from sshclient.config import HostKeyVerifier, Settings
from sshclient.errors import (
    CommandError,
    CommandTimeoutError,
    ConnectionError,
    SSHClientError,
    TerminalError,
    TransferError,
)
from sshclient.models import Results, Target, TerminalSettings
from sshclient.protocols import CommandHandler
from sshclient.services import (
    Connection,
    Session,
    copy_file,
    execute_with_agent,
    execute_with_key,
    execute_with_password,
    run_with_timeout,
)

__version__ = "0.1.0"

__all__ = [
    "CommandError",
    "CommandHandler",
    "CommandTimeoutError",
    "Connection",
    "ConnectionError",
    "HostKeyVerifier",
    "Results",
    "SSHClientError",
    "Session",
    "Settings",
    "Target",
    "TerminalError",
    "TerminalSettings",
    "TransferError",
    "__version__",
    "copy_file",
    "execute_with_agent",
    "execute_with_key",
    "execute_with_password",
    "run_with_timeout",
]
