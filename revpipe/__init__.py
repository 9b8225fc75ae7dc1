# revpipe: connect out to two TCP endpoints and splice them together.
#
# See revpipe/relay.py for the copy loop and revpipe/cli.py for the entry point.
from .endpoint import Endpoint
from .relay import BUFFER_SIZE, RelaySession, RelayStats

__version__ = "0.1.0"

__all__ = ["BUFFER_SIZE", "Endpoint", "RelaySession", "RelayStats", "__version__"]
