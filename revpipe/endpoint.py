from __future__ import annotations

import socket
from dataclasses import dataclass

from .errors import InvalidPortError, ResolveError

PORT_MIN = 1
PORT_MAX = 65535


def parse_port(text: str) -> int:
    # plain ASCII digits only: no sign, whitespace, underscores or other scripts
    if not (isinstance(text, str) and text.isascii() and text.isdigit()):
        raise InvalidPortError(f"invalid target port: {text!r}")
    port = int(text, 10)
    if not PORT_MIN <= port <= PORT_MAX:
        raise InvalidPortError(f"invalid target port: {text!r}")
    return port


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    @classmethod
    def parse(cls, host: str, port_text: str) -> Endpoint:
        return cls(host=host, port=parse_port(port_text))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def resolve(endpoint: Endpoint) -> str:
    """Return the IPv4 address for the endpoint host.

    Dotted-quad literals come back unchanged; names go through the OS
    resolver.
    """
    try:
        return socket.gethostbyname(endpoint.host)
    except (OSError, UnicodeError) as exc:
        raise ResolveError(f"gethostbyname {endpoint.host}: {exc}") from exc
