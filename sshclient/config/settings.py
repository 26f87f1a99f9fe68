"""Client settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

from sshclient.config.host_keys import HostKeyVerifier
from sshclient.models import TerminalSettings

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Client settings.

    Build one explicitly (tests do) or load it with ``from_env()``.
    """

    # Timeouts (seconds)
    command_timeout: int = field(default=30)
    connect_timeout: int = field(default=15)

    # Host key verification ("" = ~/.ssh/known_hosts, "none" = disabled)
    known_hosts: str = field(default="")
    strict_host_key_checking: bool = field(default=True)

    # Terminal requested for executed commands
    term_type: str = field(default="xterm")
    term_width: int = field(default=80)
    term_height: int = field(default=40)

    # Logging
    log_level: str = field(default="INFO")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from SSHCLIENT_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            command_timeout=cls._get_int("SSHCLIENT_COMMAND_TIMEOUT", 30),
            connect_timeout=cls._get_int("SSHCLIENT_CONNECT_TIMEOUT", 15),
            known_hosts=os.getenv("SSHCLIENT_KNOWN_HOSTS", ""),
            strict_host_key_checking=cls._get_bool(
                "SSHCLIENT_STRICT_HOST_KEY_CHECKING", True
            ),
            term_type=os.getenv("SSHCLIENT_TERM_TYPE", "xterm"),
            term_width=cls._get_int("SSHCLIENT_TERM_WIDTH", 80),
            term_height=cls._get_int("SSHCLIENT_TERM_HEIGHT", 40),
            log_level=os.getenv("SSHCLIENT_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def known_hosts_path(self) -> str | None:
        """Resolved known_hosts path, or None if verification is disabled.

        Raises:
            FileNotFoundError: If strict checking and the file is missing
        """
        verifier = HostKeyVerifier(
            known_hosts_path=self.known_hosts or None,
            strict_checking=self.strict_host_key_checking,
        )
        return verifier.get_known_hosts_path()

    @property
    def terminal(self) -> TerminalSettings:
        """Terminal request built from the term_* settings."""
        return TerminalSettings(
            term_type=self.term_type,
            width=self.term_width,
            height=self.term_height,
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
