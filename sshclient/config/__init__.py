"""Configuration for sshclient.

- Settings: client timeouts, terminal and logging settings (env or explicit)
- HostKeyVerifier: known_hosts resolution for server verification
"""

from sshclient.config.host_keys import HostKeyVerifier
from sshclient.config.settings import Settings

__all__ = ["HostKeyVerifier", "Settings"]
