"""SSH-related data models."""

from dataclasses import dataclass, field

import asyncssh

DEFAULT_TERM_TYPE = "xterm"
DEFAULT_TERM_WIDTH = 80
DEFAULT_TERM_HEIGHT = 40


def default_terminal_modes() -> dict[int, int]:
    """Echo disabled, 14.4 kbaud input and output speed."""
    return {
        asyncssh.PTY_ECHO: 0,
        asyncssh.PTY_OP_ISPEED: 14400,
        asyncssh.PTY_OP_OSPEED: 14400,
    }


@dataclass
class Target:
    """Where to connect and as whom."""

    hostname: str
    username: str
    port: int = 22

    @property
    def address(self) -> str:
        """host:port string used in logs and error messages."""
        if ":" in self.hostname:
            return f"[{self.hostname}]:{self.port}"
        return f"{self.hostname}:{self.port}"


@dataclass
class TerminalSettings:
    """Pseudo-terminal requested alongside a session's channel."""

    term_type: str = DEFAULT_TERM_TYPE
    width: int = DEFAULT_TERM_WIDTH
    height: int = DEFAULT_TERM_HEIGHT
    modes: dict[int, int] = field(default_factory=default_terminal_modes)

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) in characters."""
        return (self.width, self.height)
