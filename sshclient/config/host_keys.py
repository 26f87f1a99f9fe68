"""SSH host key verification.

Resolves which known_hosts file the client verifies servers against.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DISABLED = "none"


class HostKeyVerifier:
    """Resolve the known_hosts file used when dialing.

    Verification fails closed: in strict mode a missing file is an error,
    never a silent downgrade.
    """

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts, "none" to disable,
                or None for ~/.ssh/known_hosts
            strict_checking: Fail when the known_hosts file is missing

        Raises:
            FileNotFoundError: If strict mode and the file is missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve(known_hosts_path)

    def _resolve(self, value: str | None) -> str | None:
        if value and value.lower() == DISABLED:
            logger.critical(
                "SSH host key verification DISABLED; "
                "connections are open to MITM attacks"
            )
            return None

        if value:
            path = Path(os.path.expanduser(value))
            hint = f"create it with: ssh-keyscan <hostname> >> {path}"
        else:
            path = Path.home() / ".ssh" / "known_hosts"
            hint = f"connect once with ssh or run: ssh-keyscan <hostname> >> {path}"

        if path.exists():
            return str(path)

        if self.strict_checking:
            raise FileNotFoundError(
                f"SSH host key verification required but known_hosts file "
                f"not found: {path}\n"
                f"To fix this, {hint}\n"
                f"Or disable verification (NOT RECOMMENDED): "
                f"SSHCLIENT_KNOWN_HOSTS={DISABLED}"
            )

        logger.warning(
            "known_hosts not found at %s, host key verification disabled",
            path,
        )
        return None

    def get_known_hosts_path(self) -> str | None:
        """Path to the known_hosts file, or None if verification is disabled."""
        return self._known_hosts

    def is_enabled(self) -> bool:
        """True when servers are verified against a known_hosts file."""
        return self._known_hosts is not None
