from __future__ import annotations

# Process exit statuses
EXIT_OK = 0
EXIT_USAGE = 2
EXIT_ENDPOINT = 25
EXIT_DIAL = 26
EXIT_RELAY = 30


class RevpipeError(Exception):
    exit_code: int = EXIT_RELAY


class SetupError(RevpipeError):
    """Failure before the relay loop starts."""


class InvalidPortError(SetupError):
    exit_code = EXIT_ENDPOINT


class ResolveError(SetupError):
    exit_code = EXIT_ENDPOINT


class SocketCreateError(SetupError):
    exit_code = EXIT_DIAL


class ConnectError(SetupError):
    exit_code = EXIT_DIAL
