"""SCP sink protocol: push one file to a remote ``scp -t`` receiver.

Wire format written to the remote stdin::

    C<mode, 6 octal digits> <size> <base filename>\\n
    <size bytes of file data>
    \\x00

The receiver answers on stdout with status-framed lines: a status byte
(0 = ok, 1 = warning, 2 = fatal) followed by a message and a newline. Only
the first message is surfaced to the caller.
"""

import contextlib
import logging
import os
import re
import shlex
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import asyncssh

from sshclient.errors import CommandError, TransferError

if TYPE_CHECKING:
    from sshclient.services.session import Session

logger = logging.getLogger(__name__)

SCP_TERMINATOR = b"\x00"
CHUNK_SIZE = 32 * 1024

# Status bytes 0, 1 and 2 delimit reply messages
_STATUS_BOUNDARY = re.compile(rb"[\x00-\x02]")


def scp_command(destination: str) -> str:
    """Remote command starting a quiet SCP sink for ``destination``."""
    return f"scp -tq {shlex.quote(destination)}"


def encode_file_header(mode: int, size: int, filename: str) -> bytes:
    """Encode the ``C`` control line announcing one file.

    Args:
        mode: Permission bits (e.g. 0o644)
        size: File length in bytes
        filename: Local file name; only its base name is sent

    Returns:
        Control line including the trailing newline

    Raises:
        ValueError: If the base name is empty or contains a newline
    """
    name = os.path.basename(filename)
    if not name or "\n" in name:
        raise ValueError(f"Invalid SCP file name: {filename!r}")
    return f"C{stat.S_IMODE(mode):06o} {size} {name}\n".encode()


def decode_status_message(data: bytes) -> str:
    """Extract the first message from an SCP sink's status stream.

    The leading status byte is dropped, the rest is split on further
    status bytes and only the first message (trailing newline trimmed)
    is kept.

    Empty segments are skipped, so the first message with text is returned
    even when the sink sent a bare ``\\x00`` ack ahead of it. This differs
    from taking the first segment unconditionally.

    Examples:
        >>> decode_status_message(b"\\x01warning text\\n\\x02ignored\\n")
        'warning text'
    """
    if not data:
        return ""

    for segment in _STATUS_BOUNDARY.split(data[1:]):
        if segment:
            if segment.endswith(b"\n"):
                segment = segment[:-1]
            return segment.decode("utf-8", errors="replace")
    return ""


async def copy_file(
    session: "Session",
    local_path: str | Path,
    remote_destination: str,
    mode: int | None = None,
) -> int:
    """Push one local file to ``remote_destination`` over ``session``.

    Args:
        session: Open session (one channel is used for the transfer)
        local_path: File to send
        remote_destination: Remote file or directory path
        mode: Permission bits to send (default: the local file's)

    Returns:
        Number of file bytes sent

    Raises:
        TransferError: If the local file cannot be read or the channel
            fails while streaming
        CommandError: If the remote receiver exits non-zero; stdout holds
            the first decoded status message
        ConnectionError: If the channel cannot be opened
    """
    path = Path(local_path)
    try:
        handle = path.open("rb")
    except OSError as e:
        raise TransferError(f"Cannot read {path}: {e}") from e

    with handle:
        st = os.fstat(handle.fileno())
        file_mode = stat.S_IMODE(st.st_mode) if mode is None else mode
        size = st.st_size

        logger.info(
            "Copying %s (%d bytes, mode %04o) to %s",
            path,
            size,
            file_mode,
            remote_destination,
        )
        channel = await session.open_channel(
            scp_command(remote_destination), capture=True
        )

        try:
            await channel.write(encode_file_header(file_mode, size, path.name))
            remaining = size
            while remaining > 0:
                chunk = handle.read(min(CHUNK_SIZE, remaining))
                if not chunk:
                    raise OSError(f"{path} shrank during transfer")
                await channel.write(chunk)
                remaining -= len(chunk)
            await channel.write(SCP_TERMINATOR)
        except (OSError, asyncssh.Error) as e:
            with contextlib.suppress(OSError):
                channel.write_eof()
            channel.close()
            logger.error("SCP transfer to %s aborted: %s", remote_destination, e)
            raise TransferError(
                f"SCP transfer to {remote_destination} failed: {e}"
            ) from e

        # The receiver may already have exited after reading the terminator
        with contextlib.suppress(OSError):
            channel.write_eof()
        await channel.wait_closed()

    if channel.error is not None:
        logger.error(
            "SCP transfer to %s lost before completion: %s",
            remote_destination,
            channel.error,
        )
        raise TransferError(
            f"SCP transfer to {remote_destination} failed: {channel.error}"
        ) from channel.error

    exit_code = channel.exit_status
    if exit_code != 0:
        message = decode_status_message(channel.stdout)
        stderr = channel.stderr.decode("utf-8", errors="replace")
        logger.error(
            "SCP receiver for %s exited with status %d: %s",
            remote_destination,
            exit_code,
            message or stderr,
        )
        raise CommandError(exit_code, stdout=message, stderr=stderr)

    logger.info("Copied %s to %s", path, remote_destination)
    return size
