"""Tests for console logging."""

import logging
import sys
from collections.abc import Generator

import pytest

from sshclient.utils.console import COLORS, ColorfulFormatter, configure_logging


def _record(name: str, level: int, msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, args, None)


@pytest.fixture
def clean_package_logger() -> Generator[logging.Logger, None, None]:
    """Reset the sshclient logger around a test."""
    package_logger = logging.getLogger("sshclient")
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    package_logger.handlers = []
    yield package_logger
    package_logger.handlers, package_logger.level, package_logger.propagate = saved


def test_plain_format_layout() -> None:
    """Without colors a line is time | level | component | message."""
    formatter = ColorfulFormatter(use_colors=False)
    line = formatter.format(
        _record("sshclient.services.session", logging.INFO, "Running %r", "ls")
    )

    parts = [part.strip() for part in line.split("|")]
    assert parts[1] == "INFO"
    assert parts[2] == "services.session"
    assert parts[3] == "Running 'ls'"
    assert "\033[" not in line


def test_colors_applied() -> None:
    """With colors the level and address are highlighted."""
    formatter = ColorfulFormatter(use_colors=True)
    line = formatter.format(
        _record("sshclient.services.connection", logging.ERROR, "lost bob@host:22")
    )

    assert COLORS["bright_red"] in line
    assert f"{COLORS['bright_magenta']}bob@host:22{COLORS['reset']}" in line


def test_longest_prefix_component_color() -> None:
    """Component color comes from the most specific prefix."""
    formatter = ColorfulFormatter()
    assert formatter._get_component_color("sshclient.services.scp") == COLORS["cyan"]
    assert formatter._get_component_color("sshclient.server.dispatcher") == COLORS["yellow"]
    assert formatter._get_component_color("other") == COLORS["white"]


def test_exception_included() -> None:
    """Tracebacks are appended to the line."""
    formatter = ColorfulFormatter(use_colors=False)
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "sshclient.server", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    assert "RuntimeError: boom" in formatter.format(record)


def test_configure_logging(clean_package_logger: logging.Logger) -> None:
    """configure_logging installs one handler and sets the level."""
    configure_logging(level="debug", use_colors=False)
    configure_logging(level="debug", use_colors=False)

    assert clean_package_logger.level == logging.DEBUG
    assert len(clean_package_logger.handlers) == 1
    assert isinstance(clean_package_logger.handlers[0].formatter, ColorfulFormatter)
    assert clean_package_logger.propagate is False
    assert logging.getLogger("asyncssh").level == logging.WARNING


def test_configure_logging_from_env(
    clean_package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Level defaults to SSHCLIENT_LOG_LEVEL."""
    monkeypatch.setenv("SSHCLIENT_LOG_LEVEL", "WARNING")
    configure_logging()
    assert clean_package_logger.level == logging.WARNING
