from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Sequence

from .connector import dial_pair
from .console import Console
from .endpoint import Endpoint
from .errors import EXIT_OK, EXIT_RELAY, SetupError
from .relay import RelaySession


@dataclass
class _CliArgs:
    remotehost1: str = ""
    remoteport1: str = ""
    remotehost2: str = ""
    remoteport2: str = ""
    threaded: bool = False
    verbose: bool = False
    log_file: str | None = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revpipe",
        description=(
            "Reverse data pipe: connect out to two TCP endpoints and relay "
            "bytes between them until either side closes."
        ),
    )
    parser.add_argument("remotehost1", help="First remote host (name or IPv4 address)")
    parser.add_argument("remoteport1", help="First remote port")
    parser.add_argument("remotehost2", help="Second remote host (name or IPv4 address)")
    parser.add_argument("remoteport2", help="Second remote port")
    parser.add_argument(
        "--threaded",
        action="store_true",
        help="Run one pump thread per direction instead of the select loop",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every relayed chunk with a hex preview",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write log lines to file (relayed chunks as full hex dumps)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv, namespace=_CliArgs())

    log_file = open(args.log_file, "w", encoding="utf-8") if args.log_file else None
    console = Console(verbose=args.verbose, log_file=log_file)
    try:
        return _run(args, console)
    except KeyboardInterrupt:
        console.log("SYS", "interrupted")
        return EXIT_OK
    finally:
        console.close()


def _run(args: _CliArgs, console: Console) -> int:
    try:
        endpoint_a = Endpoint.parse(args.remotehost1, args.remoteport1)
        endpoint_b = Endpoint.parse(args.remotehost2, args.remoteport2)
        conn_a, conn_b = dial_pair(endpoint_a, endpoint_b, console)
    except SetupError as exc:
        console.error(str(exc))
        return exc.exit_code

    session = RelaySession(conn_a, conn_b, console, label_a=str(endpoint_a), label_b=str(endpoint_b))
    stats = session.run(threaded=args.threaded)
    return EXIT_RELAY if stats.failed else EXIT_OK
