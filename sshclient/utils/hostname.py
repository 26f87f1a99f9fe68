"""Host address parsing utilities."""

DEFAULT_SSH_PORT = 22


def split_host_port(host: str, default_port: int = DEFAULT_SSH_PORT) -> tuple[str, int]:
    """Split a "host[:port]" string into hostname and port.

    <parameters>
    host: "example.com", "example.com:2222", "[::1]:2222" or a bare IPv6 address
    default_port: Port used when none is given
    </parameters>

    <returns>
    Tuple of (hostname, port)
    </returns>

    <raises>
    ValueError: If host is empty or the port is not a valid number
    </raises>
    """
    host = host.strip()
    if not host:
        raise ValueError("Host cannot be empty")

    if host.startswith("["):
        end = host.find("]")
        if end == -1:
            raise ValueError(f"Unterminated IPv6 address: {host}")
        hostname = host[1:end]
        rest = host[end + 1 :]
        if not rest:
            return hostname, default_port
        if not rest.startswith(":"):
            raise ValueError(f"Invalid host: {host}")
        return hostname, _parse_port(rest[1:], host)

    # More than one colon without brackets is a bare IPv6 address
    if host.count(":") != 1:
        return host, default_port

    hostname, port = host.split(":", 1)
    if not hostname:
        raise ValueError(f"Missing hostname: {host}")
    return hostname, _parse_port(port, host)


def _parse_port(value: str, host: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port in {host!r}: {value!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in {host!r}: {port}")
    return port
