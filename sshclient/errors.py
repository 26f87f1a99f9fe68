"""Exception hierarchy for sshclient.

Every failure path surfaces one of these to the immediate caller. Nothing
is retried internally; retry policy belongs to the caller.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sshclient.models import Results


class SSHClientError(Exception):
    """Base class for all sshclient errors."""


class ConnectionError(SSHClientError):
    """Dial, handshake, authentication or channel-open failure."""

    def __init__(self, host_name: str, original_error: Exception | str):
        """Initialize connection error.

        Args:
            host_name: Host (or host:port) that was being reached
            original_error: Underlying exception or description
        """
        self.host_name = host_name
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host_name}: {original_error}")


class TerminalError(SSHClientError):
    """Pseudo-terminal request was refused or invalid.

    The owning connection has already been closed when this is raised.
    """


class CommandError(SSHClientError):
    """Remote process ran but terminated with a non-zero status."""

    def __init__(
        self,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        exit_signal: str | None = None,
    ):
        """Initialize command error.

        Args:
            exit_code: Exit status reported by the remote side
            stdout: Captured standard output (or decoded SCP message)
            stderr: Captured standard error
            exit_signal: Signal name if the process was killed by one
        """
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.exit_signal = exit_signal

        detail = stderr.strip() or stdout.strip()
        if exit_signal:
            message = f"Command killed by signal {exit_signal}"
        else:
            message = f"Command exited with status {exit_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def results(self) -> "Results":
        """Rebuild the Results snapshot this error was raised for."""
        from sshclient.models import Results

        return Results(
            exit_code=self.exit_code,
            stdout=self.stdout,
            stderr=self.stderr,
            exit_signal=self.exit_signal,
        )


class CommandTimeoutError(SSHClientError, TimeoutError):
    """Deadline elapsed before the command finished.

    The remote command may still be running; only closing the session or
    connection reclaims the underlying socket.
    """

    def __init__(self, command: str, timeout: float):
        """Initialize timeout error.

        Args:
            command: Command that was running
            timeout: Deadline in seconds
        """
        self.command = command
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g} seconds running {command!r}")


class TransferError(SSHClientError):
    """Local or channel I/O failure while pushing a file over SCP."""
