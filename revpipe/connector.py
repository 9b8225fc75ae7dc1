from __future__ import annotations

import socket

from .console import Console
from .endpoint import Endpoint, resolve
from .errors import ConnectError, SocketCreateError


def dial(endpoint: Endpoint) -> socket.socket:
    address = resolve(endpoint)

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise SocketCreateError(f"socket: {exc}") from exc

    try:
        sock.connect((address, endpoint.port))
    except OSError as exc:
        sock.close()
        raise ConnectError(f"connect {endpoint}: {exc}") from exc
    return sock


def dial_pair(
    endpoint_a: Endpoint,
    endpoint_b: Endpoint,
    console: Console,
) -> tuple[socket.socket, socket.socket]:
    """Connect to both endpoints, A first.

    Either both sockets come back connected or none stays open.
    """
    conn_a = dial(endpoint_a)
    console.log("TCP", f"connected to {endpoint_a}")
    try:
        conn_b = dial(endpoint_b)
    except BaseException:
        conn_a.close()
        raise
    console.log("TCP", f"connected to {endpoint_b}")
    return conn_a, conn_b
