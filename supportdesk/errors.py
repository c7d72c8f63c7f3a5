"""
Exception types shared by the relay and the client.
"""

from __future__ import annotations


class SupportDeskError(Exception):
    """Base class for supportdesk errors."""


class ProviderError(SupportDeskError):
    """The completion provider could not be reached or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidConversationError(SupportDeskError, ValueError):
    """A relay request body is not a well-formed list of messages."""


class SendInFlightError(SupportDeskError):
    """A send was issued while a previous reply is still streaming."""
