"""Client services: connections, sessions, timeout-bounded execution, SCP."""

from sshclient.services.connection import Connection
from sshclient.services.executor import (
    execute_with_agent,
    execute_with_key,
    execute_with_password,
    run_with_timeout,
)
from sshclient.services.scp import (
    copy_file,
    decode_status_message,
    encode_file_header,
    scp_command,
)
from sshclient.services.session import Channel, Session

__all__ = [
    "Channel",
    "Connection",
    "Session",
    "copy_file",
    "decode_status_message",
    "encode_file_header",
    "execute_with_agent",
    "execute_with_key",
    "execute_with_password",
    "run_with_timeout",
    "scp_command",
]
