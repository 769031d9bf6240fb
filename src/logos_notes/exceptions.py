"""Exceptions raised while syncing Logos notes."""
from __future__ import annotations

from typing import Optional


class LogosNotesError(Exception):
    """Base exception for logos-notes-sync."""


class AuthenticationError(LogosNotesError):
    """Raised when no stored credential is available."""


class AuthenticationExpiredError(AuthenticationError):
    """Raised when the notes service rejects the stored credential."""


class TransportError(LogosNotesError):
    """Raised for non-success HTTP responses and network failures."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
