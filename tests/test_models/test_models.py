"""Tests for data models."""

import asyncssh
import pytest

from sshclient.errors import CommandError
from sshclient.models import Results, Target, TerminalSettings, default_terminal_modes


class TestResults:
    """Test Results snapshot."""

    def test_ok(self) -> None:
        """Exit 0 without a signal is ok, even with stderr output."""
        results = Results(exit_code=0, stdout="out", stderr="warning")
        assert results.ok
        assert results.check() is results

    def test_nonzero_not_ok(self) -> None:
        """Non-zero exit raises from check() with the captured output."""
        results = Results(exit_code=23, stdout="meh", stderr="failure")
        assert not results.ok

        with pytest.raises(CommandError) as exc_info:
            results.check()

        assert exc_info.value.exit_code == 23
        assert exc_info.value.stdout == "meh"
        assert exc_info.value.stderr == "failure"
        assert exc_info.value.results == results

    def test_signal_not_ok(self) -> None:
        """A process killed by a signal is a failure."""
        results = Results(exit_code=0, stdout="", stderr="", exit_signal="KILL")
        assert not results.ok
        with pytest.raises(CommandError, match="signal KILL"):
            results.check()

    def test_frozen(self) -> None:
        """Results cannot be modified."""
        results = Results(exit_code=0, stdout="", stderr="")
        with pytest.raises(AttributeError):
            results.exit_code = 1  # type: ignore[misc]


class TestTarget:
    """Test Target addresses."""

    def test_address(self) -> None:
        assert Target(hostname="example.com", username="bob").address == "example.com:22"

    def test_ipv6_address_bracketed(self) -> None:
        target = Target(hostname="::1", username="bob", port=2222)
        assert target.address == "[::1]:2222"


class TestTerminalSettings:
    """Test terminal defaults."""

    def test_defaults(self) -> None:
        """xterm, 80x40, echo off and 14400 baud."""
        terminal = TerminalSettings()

        assert terminal.term_type == "xterm"
        assert terminal.size == (80, 40)
        assert terminal.modes == {
            asyncssh.PTY_ECHO: 0,
            asyncssh.PTY_OP_ISPEED: 14400,
            asyncssh.PTY_OP_OSPEED: 14400,
        }

    def test_modes_not_shared(self) -> None:
        """Each instance gets its own modes dict."""
        first = TerminalSettings()
        first.modes[asyncssh.PTY_ECHO] = 1
        assert TerminalSettings().modes == default_terminal_modes()
