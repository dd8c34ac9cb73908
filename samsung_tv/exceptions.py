"""
Exceptions raised by Samsung TV control.
"""

from typing import Optional


class SamsungTVError(Exception):
    """Base exception for Samsung TV control errors."""
    pass


class TransportError(SamsungTVError):
    """Raised on network failures, unexpected responses or a closed channel."""
    pass


class TimedOut(SamsungTVError):
    """Raised when a probe or handshake does not complete in time."""
    pass


class NotAuthorized(SamsungTVError):
    """Raised when the TV refuses the remote channel.

    The user has to approve access on the TV screen before retrying.
    """
    pass


class NotConnected(SamsungTVError):
    """Raised when a command is sent without a ready session."""
    pass


class PowerChangeTimeout(SamsungTVError):
    """Raised when the TV did not reach the requested power state in time."""

    def __init__(self, message: str, target, observed: Optional[object] = None):
        super().__init__(message)
        self.target = target
        self.observed = observed
