import io
import socket
import threading

import pytest

from revpipe.console import Console
from revpipe.relay import RelaySession


class StubServer:
    """Loopback listener standing in for one of the remote services."""

    def __init__(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(1)
        self.sock.settimeout(5.0)
        self.port = self.sock.getsockname()[1]

    def accept(self) -> socket.socket:
        conn, _ = self.sock.accept()
        conn.settimeout(5.0)
        return conn

    def close(self):
        self.sock.close()


class Runner:
    """Runs a blocking call on a daemon thread so a hang fails the test instead of the run."""

    def __init__(self, target, *args, **kwargs):
        self.result = None
        self.error = None
        self._thread = threading.Thread(target=self._run, args=(target, args, kwargs), daemon=True)
        self._thread.start()

    def _run(self, target, args, kwargs):
        try:
            self.result = target(*args, **kwargs)
        except BaseException as exc:
            self.error = exc

    def wait(self, timeout=1.0):
        self._thread.join(timeout)
        assert not self._thread.is_alive(), "did not finish in time"
        if self.error is not None:
            raise self.error
        return self.result


class FaultySocket:
    """Wraps a socket and fails one operation with the given error."""

    def __init__(self, sock, op, error):
        self._sock = sock
        self._op = op
        self._error = error

    def __getattr__(self, name):
        return getattr(self._sock, name)

    def recv_into(self, *args):
        if self._op == "recv_into":
            raise self._error
        return self._sock.recv_into(*args)

    def sendall(self, *args):
        if self._op == "sendall":
            raise self._error
        return self._sock.sendall(*args)


class RecordingConsole(Console):
    """Console that only records the direction tag of each relayed chunk."""

    def __init__(self):
        super().__init__(stream=io.StringIO())
        self.tags = []

    def data(self, tag, data):
        self.tags.append(tag)


def recv_exactly(sock, size):
    chunks = []
    remaining = size
    while remaining:
        data = sock.recv(min(remaining, 65536))
        assert data, f"stream ended with {remaining} bytes outstanding"
        chunks.append(data)
        remaining -= len(data)
    return b"".join(chunks)


@pytest.fixture
def console():
    return Console(stream=io.StringIO())


@pytest.fixture
def stub_servers():
    servers = [StubServer(), StubServer()]
    yield servers
    for server in servers:
        server.close()


@pytest.fixture
def free_port():
    """A loopback port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def wired(stub_servers):
    """Both relay-side sockets connected, plus the accepted peer ends."""
    l1, l2 = stub_servers
    conn_a = socket.create_connection(("127.0.0.1", l1.port))
    conn_b = socket.create_connection(("127.0.0.1", l2.port))
    peer_a = l1.accept()
    peer_b = l2.accept()
    yield conn_a, conn_b, peer_a, peer_b
    for sock in (conn_a, conn_b, peer_a, peer_b):
        sock.close()


@pytest.fixture
def session(wired, console):
    conn_a, conn_b, _, _ = wired
    relay = RelaySession(conn_a, conn_b, console)
    yield relay
    relay.close()
