from __future__ import annotations


class StarpulseError(Exception):
    """Base error for starpulse domain/use cases."""


class ConfigurationError(StarpulseError):
    """A required setting (e.g. a downstream credential) is missing.

    The only error category that surfaces as a request-level failure.
    """


class UpstreamError(StarpulseError):
    """Network / status / payload errors from an upstream service."""


class DispatchError(StarpulseError):
    """The fan-out batch as a whole could not be executed."""


class DispatchRejected(DispatchError):
    """Batch refused up front (payload ceilings), nothing was executed."""
