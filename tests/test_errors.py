"""Tests for the exception hierarchy."""

import pytest

from sshclient.errors import (
    CommandError,
    CommandTimeoutError,
    ConnectionError,
    SSHClientError,
    TerminalError,
    TransferError,
)


@pytest.mark.parametrize(
    "error",
    [
        ConnectionError("host:22", "refused"),
        TerminalError("no pty"),
        CommandError(1),
        CommandTimeoutError("sleep 10", 1.5),
        TransferError("broken pipe"),
    ],
)
def test_all_errors_share_base(error: Exception) -> None:
    """Every error can be caught as SSHClientError."""
    assert isinstance(error, SSHClientError)


def test_connection_error_attributes() -> None:
    """ConnectionError keeps host name and original error."""
    original = OSError("Connection refused")
    error = ConnectionError("example.com:22", original)

    assert error.host_name == "example.com:22"
    assert error.original_error is original
    assert "Cannot connect to example.com:22" in str(error)


def test_timeout_is_builtin_timeout() -> None:
    """CommandTimeoutError is also a TimeoutError."""
    error = CommandTimeoutError("sleep 10", 0.5)

    assert isinstance(error, TimeoutError)
    assert error.timeout == 0.5
    assert error.command == "sleep 10"
    assert "0.5 seconds" in str(error)


def test_command_error_message_prefers_stderr() -> None:
    """The message carries the exit code and stderr text."""
    error = CommandError(23, stdout="meh", stderr="we have a failure to communicate\n")
    assert str(error) == "Command exited with status 23: we have a failure to communicate"


def test_command_error_falls_back_to_stdout() -> None:
    """Without stderr the stdout text is used (SCP status messages)."""
    error = CommandError(1, stdout="warning text")
    assert str(error) == "Command exited with status 1: warning text"
