from __future__ import annotations

import select
import socket
import threading
from dataclasses import dataclass

from .console import Console

BUFFER_SIZE = 4096
JOIN_TIMEOUT = 1.0

CLOSE_EOF = "eof"
CLOSE_ERROR = "error"


@dataclass
class RelayStats:
    a_to_b: int = 0
    b_to_a: int = 0
    reason: str | None = None
    closed_by: str | None = None
    detail: str = ""

    @property
    def failed(self) -> bool:
        return self.reason == CLOSE_ERROR


@dataclass
class _Pipe:
    src: socket.socket
    dst: socket.socket
    src_label: str
    dst_label: str
    tag: str
    forward: bool


class RelaySession:
    """Splices two connected sockets together until either side ends.

    The session owns both sockets: they are closed when ``run`` returns,
    whatever the outcome.
    """

    def __init__(
        self,
        conn_a: socket.socket,
        conn_b: socket.socket,
        console: Console,
        label_a: str = "A",
        label_b: str = "B",
    ):
        self.conn_a = conn_a
        self.conn_b = conn_b
        self.console = console
        self.label_a = label_a
        self.label_b = label_b
        self.stats = RelayStats()
        self._ab = _Pipe(conn_a, conn_b, label_a, label_b, "A->B", forward=True)
        self._ba = _Pipe(conn_b, conn_a, label_b, label_a, "B->A", forward=False)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._closed = False

    def run(self, threaded: bool = False) -> RelayStats:
        mode = "threaded" if threaded else "select"
        self.console.log("SYS", f"relaying {self.label_a} <-> {self.label_b} ({mode})")
        try:
            if threaded:
                self._run_threaded()
            else:
                self._run_select()
        finally:
            self.close()

        if self.stats.reason is None:
            self._finish(CLOSE_ERROR, "session", "relay stopped without a close reason")
        stats = self.stats
        if stats.failed:
            self.console.error(f"{stats.closed_by}: {stats.detail}")
        else:
            self.console.log("TCP", f"{stats.closed_by} closed the connection")
        self.console.log(
            "SYS",
            f"session closed ({stats.reason}) A->B={stats.a_to_b} bytes B->A={stats.b_to_a} bytes",
        )
        return stats

    def _run_select(self) -> None:
        # One buffer for both directions: only one transfer runs per pass.
        view = memoryview(bytearray(BUFFER_SIZE))
        conns = [self.conn_a, self.conn_b]
        while True:
            try:
                readable, _, _ = select.select(conns, [], [])
            except (OSError, ValueError) as exc:
                self._finish(CLOSE_ERROR, "select", str(exc))
                return

            # A has priority; B is picked up on the next pass if both are ready.
            if self.conn_a in readable:
                pipe = self._ab
            elif self.conn_b in readable:
                pipe = self._ba
            else:
                continue
            if not self._guarded_step(pipe, view):
                return

    def _run_threaded(self) -> None:
        pumps = [
            threading.Thread(target=self._pump, args=(pipe,), name=f"revpipe {pipe.tag}", daemon=True)
            for pipe in (self._ab, self._ba)
        ]
        for t in pumps:
            t.start()

        self._stop.wait()
        # unblocks the pump still sitting in recv
        self._shutdown()
        for t in pumps:
            t.join(JOIN_TIMEOUT)

    def _pump(self, pipe: _Pipe) -> None:
        view = memoryview(bytearray(BUFFER_SIZE))
        try:
            while not self._stop.is_set():
                if not self._guarded_step(pipe, view):
                    break
        finally:
            self._stop.set()

    def _guarded_step(self, pipe: _Pipe, view: memoryview) -> bool:
        try:
            return self._step(pipe, view)
        except Exception as exc:
            self._finish(CLOSE_ERROR, pipe.src_label, f"relay error: {exc!r}")
            return False

    def _step(self, pipe: _Pipe, view: memoryview) -> bool:
        """Move one chunk from pipe.src to pipe.dst; False ends the session."""
        try:
            n = pipe.src.recv_into(view)
        except OSError as exc:
            self._finish(CLOSE_ERROR, pipe.src_label, f"read error: {exc}")
            return False
        if n == 0:
            self._finish(CLOSE_EOF, pipe.src_label, "end of stream")
            return False

        chunk = view[:n]
        try:
            pipe.dst.sendall(chunk)
        except OSError as exc:
            self._finish(CLOSE_ERROR, pipe.dst_label, f"write error: {exc}")
            return False

        if pipe.forward:
            self.stats.a_to_b += n
        else:
            self.stats.b_to_a += n
        self.console.data(pipe.tag, chunk)
        return True

    def _finish(self, reason: str, side: str, detail: str) -> None:
        with self._lock:
            if self.stats.reason is None:
                self.stats.reason = reason
                self.stats.closed_by = side
                self.stats.detail = detail
        self._stop.set()

    def _shutdown(self) -> None:
        for conn in (self.conn_a, self.conn_b):
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.conn_a.close()
        self.conn_b.close()
