"""
Error taxonomy for the Polymarket adapters and market tracking.

Quote, metadata and order failures are caught at the call site and degraded
to an absent value. Only discovery failures at startup end the process.
"""

from __future__ import annotations


class PriceSourceError(Exception):
    """Base class for failures talking to Gamma or the CLOB."""
    pass


class NetworkError(PriceSourceError):
    """Transport failure, timeout or non-2xx response."""
    pass


class ParseError(PriceSourceError):
    """Response body is malformed or missing required fields."""
    pass


class NotFoundError(PriceSourceError):
    """Discovery slug does not (yet) resolve to an active, open market."""
    pass


class InvariantViolation(Exception):
    """The SOL and BTC markets resolved to the same condition id."""
    pass


class DataQualityWarning(Exception):
    """An outcome label could not be classified as up or down."""
    pass
