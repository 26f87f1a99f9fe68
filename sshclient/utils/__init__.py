"""Utilities for sshclient."""

from sshclient.utils.console import ColorfulFormatter, configure_logging
from sshclient.utils.hostname import split_host_port

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "split_host_port",
]
