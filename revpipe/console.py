from __future__ import annotations

import sys
import threading
import time
from typing import TextIO

RESET = "\033[0m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
CYAN = "\033[96m"
WHITE = "\033[97m"

TAG_COLORS = {
    "SYS": YELLOW,
    "TCP": CYAN,
    "A->B": GREEN,
    "B->A": BLUE,
}


def full_hex(data: bytes) -> str:
    """Full hex dump without truncation (for log file)."""
    return " ".join(f"{b:02X}" for b in data)


def short_hex(data: bytes, limit: int = 64) -> str:
    if len(data) <= limit:
        return " ".join(f"{b:02X}" for b in data)
    head = data[:limit]
    return f"{' '.join(f'{b:02X}' for b in head)} …(+{len(data) - limit})"


def _timestamp() -> str:
    now = time.time()
    return time.strftime("%H:%M:%S", time.localtime(now)) + f".{int(now * 1000) % 1000:03d}"


class Console:
    def __init__(self, verbose: bool = False, log_file: TextIO | None = None, stream: TextIO | None = None):
        self.verbose: bool = verbose
        self.log_file: TextIO | None = log_file
        self.stream: TextIO = stream if stream is not None else sys.stdout
        # both pumps log concurrently in threaded mode
        self._lock = threading.Lock()

    def log(self, tag: str, message: str) -> None:
        line = f"[{_timestamp()}] [{tag}] {message}"
        with self._lock:
            print(f"{TAG_COLORS.get(tag, WHITE)}{line}{RESET}", file=self.stream)
            self._write_file(line)

    def data(self, tag: str, data: bytes) -> None:
        """Trace one relayed chunk: preview on screen when verbose, full dump to the log file."""
        if not self.verbose and self.log_file is None:
            return
        line = f"[{_timestamp()}] [{tag}] bytes={len(data)}"
        with self._lock:
            if self.verbose:
                print(f"{TAG_COLORS.get(tag, WHITE)}{line} hex={short_hex(data)}{RESET}", file=self.stream)
            self._write_file(f"{line} hex={full_hex(data)}")

    def error(self, message: str) -> None:
        line = f"[{_timestamp()}] [ERROR] {message}"
        with self._lock:
            print(f"{RED}{line}{RESET}", file=sys.stderr)
            self._write_file(line)

    def _write_file(self, line: str) -> None:
        if self.log_file:
            self.log_file.write(line + "\n")
            self.log_file.flush()

    def close(self) -> None:
        if self.log_file:
            self.log_file.close()
            self.log_file = None
