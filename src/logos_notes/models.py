"""Data models for Logos note synchronization."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

UNKNOWN = "Unknown"

# Notes are kept as the decoded JSON objects returned by the notes service.
RawNote = Dict[str, Any]


@dataclass(frozen=True)
class ProcessedNote:
    """A note or highlight flattened into the shape used for output.

    ``created`` and ``modified`` are the service's ISO-8601 strings. They are
    ordered lexically, which matches chronological order only while the service
    emits zero-padded timestamps in a single format.
    """

    id: str
    kind: str
    created: str
    modified: str
    text: str
    reference: Optional[str] = None
    reference_raw: Optional[str] = None
    resource_id: str = UNKNOWN
    resource_title: str = UNKNOWN
    color: Optional[str] = None
    offset: Optional[int] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


@dataclass(frozen=True)
class SyncResult:
    """Counts returned after writing Markdown files."""

    files_written: int = 0
    notes_written: int = 0


@dataclass(frozen=True)
class DeliveryResult:
    """Counts returned after sending highlights to Readwise."""

    sent: int = 0
    errors: int = 0
