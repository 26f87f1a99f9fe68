"""Tests for the test server's command handlers."""

import shutil
from unittest.mock import MagicMock

import pytest

from sshclient.protocols import CommandHandler
from sshclient.server.handlers import (
    BashHandler,
    ChannelIO,
    EchoHandler,
    HandlerError,
    MockHandler,
)

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


def written(method: MagicMock) -> bytes:
    """Everything passed to a mocked write method."""
    return b"".join(call.args[0] for call in method.call_args_list)


@pytest.fixture
def chan() -> MagicMock:
    """Mock server channel."""
    return MagicMock()


def test_handlers_satisfy_protocol() -> None:
    for handler in (EchoHandler(), MockHandler(), BashHandler()):
        assert isinstance(handler, CommandHandler)


def test_handler_error_default_exit_code() -> None:
    assert HandlerError("failed").exit_code == 1
    assert HandlerError("not found", exit_code=127).exit_code == 127


class TestChannelIO:
    """Test channel output helpers."""

    @pytest.mark.asyncio
    async def test_str_encoded(self, chan: MagicMock) -> None:
        io = ChannelIO(chan)
        io.write("héllo")
        chan.write.assert_called_once_with("héllo".encode())

    @pytest.mark.asyncio
    async def test_stderr(self, chan: MagicMock) -> None:
        io = ChannelIO(chan)
        io.write_stderr(b"bad")
        chan.write_stderr.assert_called_once_with(b"bad")

    @pytest.mark.asyncio
    async def test_empty_skipped(self, chan: MagicMock) -> None:
        io = ChannelIO(chan)
        io.write("")
        io.write_stderr(b"")
        chan.write.assert_not_called()
        chan.write_stderr.assert_not_called()


@pytest.mark.asyncio
async def test_echo_handler(chan: MagicMock) -> None:
    """Echo reports the command text back."""
    io = ChannelIO(chan)
    handler = EchoHandler()
    handler.bind(io)

    rc = await handler.execute("ls -la")

    assert rc == 0
    assert written(chan.write) == b"command is: 'ls -la'"


@pytest.mark.asyncio
async def test_mock_handler(chan: MagicMock) -> None:
    """Mock handler replays its scripted response."""
    io = ChannelIO(chan)
    handler = MockHandler(rc=23, stdout="meh", stderr="we have a failure to communicate")
    handler.bind(io)

    rc = await handler.execute("anything")

    assert rc == 23
    assert written(chan.write) == b"meh"
    assert written(chan.write_stderr) == b"we have a failure to communicate"


@pytest.mark.asyncio
async def test_unbound_handler_fails() -> None:
    with pytest.raises(AssertionError, match="not bound"):
        await EchoHandler().execute("ls")


@requires_bash
class TestBashHandler:
    """Test running commands in a local bash."""

    @pytest.mark.asyncio
    async def test_output_and_exit_code(self, chan: MagicMock) -> None:
        io = ChannelIO(chan)
        handler = BashHandler()
        handler.bind(io)

        rc = await handler.execute("echo hi; echo err >&2; exit 3")

        assert rc == 3
        assert written(chan.write) == b"hi\n"
        assert written(chan.write_stderr) == b"err\n"

    @pytest.mark.asyncio
    async def test_stdin_forwarded(self, chan: MagicMock) -> None:
        """Client stdin reaches the process."""
        io = ChannelIO(chan)
        handler = BashHandler()
        handler.bind(io)
        io.stdin.feed_data(b"hello\n")
        io.stdin.feed_eof()

        rc = await handler.execute("cat")

        assert rc == 0
        assert written(chan.write) == b"hello\n"

    @pytest.mark.asyncio
    async def test_killed_by_signal(self, chan: MagicMock) -> None:
        """Signal deaths are reported like a shell does (128 + signal)."""
        io = ChannelIO(chan)
        handler = BashHandler()
        handler.bind(io)
        io.stdin.feed_eof()

        rc = await handler.execute("kill -TERM $$")

        assert rc == 128 + 15


@pytest.mark.asyncio
async def test_bash_handler_missing_shell(chan: MagicMock) -> None:
    io = ChannelIO(chan)
    handler = BashHandler(shell="/nonexistent/shell")
    handler.bind(io)

    with pytest.raises(HandlerError) as exc_info:
        await handler.execute("true")

    assert exc_info.value.exit_code == 127
