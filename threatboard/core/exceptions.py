"""
Exceptions for Threatboard.
"""


class ThreatboardError(Exception):
    """Base class for all Threatboard errors."""
    pass


class CollectorError(ThreatboardError):
    """
    Raised when a collector is used outside its lifecycle, such as starting
    a one-shot fetch twice or starting a stream that is already running.
    """
    pass


class SessionError(ThreatboardError):
    """Raised on dashboard session lifecycle misuse."""
    pass
