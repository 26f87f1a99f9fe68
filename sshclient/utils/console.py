"""Colorful console logging for the sshclient package."""

import logging
import os
import re
import sys
from datetime import datetime

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Longest matching prefix wins
COMPONENT_COLORS = {
    "sshclient.services.connection": COLORS["bright_magenta"],
    "sshclient.services.session": COLORS["bright_blue"],
    "sshclient.services.executor": COLORS["bright_cyan"],
    "sshclient.services.scp": COLORS["cyan"],
    "sshclient.server": COLORS["yellow"],
    "sshclient.config": COLORS["green"],
    "default": COLORS["white"],
}

PACKAGE_PREFIX = "sshclient."

_ADDRESS_PATTERN = re.compile(r"(\w[\w.\-]*@\[?[\w.:\-]+\]?:\d+)")
_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?m?s)\b")
_EXIT_CODE_PATTERN = re.compile(r"\b((?:rc|exit_code)[=:] ?-?\d+)")

NOISY_LOGGERS = ("asyncssh", "asyncio")


class ColorfulFormatter(logging.Formatter):
    """Formatter producing ``time | LEVEL | component | message`` lines."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        matches = [
            prefix
            for prefix in COMPONENT_COLORS
            if prefix != "default" and name.startswith(prefix)
        ]
        if not matches:
            return COMPONENT_COLORS["default"]
        return COMPONENT_COLORS[max(matches, key=len)]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        """Local time, e.g. ``14:03:07.251 10/17``."""
        dt = datetime.fromtimestamp(record.created).astimezone()
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d} {dt:%m/%d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, COLORS["white"])
        return self._colorize(f"{record.levelname:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(PACKAGE_PREFIX)
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def _highlight_message(self, message: str) -> str:
        """Highlight user@host:port addresses, durations and exit codes."""
        if not self.use_colors:
            return message
        for pattern, color in (
            (_ADDRESS_PATTERN, COLORS["bright_magenta"]),
            (_DURATION_PATTERN, COLORS["bright_yellow"]),
            (_EXIT_CODE_PATTERN, COLORS["bright_cyan"]),
        ):
            message = pattern.sub(f"{color}\\1{COLORS['reset']}", message)
        return message

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = (
            f"{timestamp} {sep} {self._format_level(record)} {sep} "
            f"{self._format_component(record)} {sep} {message}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str | None = None, use_colors: bool | None = None) -> None:
    """Attach a colorful stderr handler to the ``sshclient`` logger.

    Args:
        level: Log level name; defaults to ``SSHCLIENT_LOG_LEVEL`` or INFO
        use_colors: Force colors on or off; defaults to
            ``SSHCLIENT_LOG_COLORS`` and is always off when stderr is not a TTY
    """
    if level is None:
        level = os.getenv("SSHCLIENT_LOG_LEVEL", "INFO")
    if use_colors is None:
        use_colors = os.getenv("SSHCLIENT_LOG_COLORS", "true").lower() != "false"
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger(PACKAGE_PREFIX.rstrip("."))
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only add handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
