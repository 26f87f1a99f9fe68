"""Data models for sshclient."""

from sshclient.models.command import Results
from sshclient.models.ssh import TerminalSettings, Target, default_terminal_modes

__all__ = [
    "Results",
    "Target",
    "TerminalSettings",
    "default_terminal_modes",
]
