"""Command execution data models."""

from dataclasses import dataclass

from sshclient.errors import CommandError


@dataclass(frozen=True)
class Results:
    """Immutable snapshot of one remote command execution."""

    exit_code: int
    stdout: str
    stderr: str
    exit_signal: str | None = None

    @property
    def ok(self) -> bool:
        """True when the remote process exited normally with status 0.

        Output on stderr is informational and does not affect the result.
        """
        return self.exit_code == 0 and self.exit_signal is None

    def check(self) -> "Results":
        """Return self, or raise CommandError if the command failed.

        Raises:
            CommandError: If exit code is non-zero or a signal killed the process
        """
        if not self.ok:
            raise CommandError(
                self.exit_code,
                stdout=self.stdout,
                stderr=self.stderr,
                exit_signal=self.exit_signal,
            )
        return self
