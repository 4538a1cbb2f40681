from starpulse.infrastructure.dispatch.limits import DispatchLimits, validate_batch
from starpulse.infrastructure.dispatch.local import LocalFanOutDispatcher
from starpulse.infrastructure.dispatch.remote import RemoteFanOutDispatcher
from starpulse.infrastructure.dispatch.stream_parser import (
    EventStreamParser,
    ParserState,
)

__all__ = [
    "DispatchLimits",
    "EventStreamParser",
    "LocalFanOutDispatcher",
    "ParserState",
    "RemoteFanOutDispatcher",
    "validate_batch",
]
