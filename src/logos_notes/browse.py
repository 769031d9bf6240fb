"""Search and listing helpers for previously fetched notes."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .links import create_logos_link
from .models import ProcessedNote

PREVIEW_LENGTH = 100
TITLE_LENGTH = 30


def filter_notes(
    notes: Iterable[ProcessedNote],
    search_text: str = "",
    resource_title: Optional[str] = None,
) -> List[ProcessedNote]:
    needle = search_text.lower()

    def matches(note: ProcessedNote) -> bool:
        if resource_title and note.resource_title != resource_title:
            return False
        if not needle:
            return True
        haystacks = [note.text, note.resource_title, note.reference or ""]
        return any(needle in value.lower() for value in haystacks)

    return [note for note in notes if matches(note)]


def resource_titles(notes: Iterable[ProcessedNote]) -> List[str]:
    return sorted({note.resource_title for note in notes})


def format_note_line(note: ProcessedNote) -> str:
    preview = note.text[:PREVIEW_LENGTH] + ("..." if len(note.text) > PREVIEW_LENGTH else "")
    parts = [preview]
    if note.reference:
        parts.append(note.reference)
    parts.append(note.resource_title[:TITLE_LENGTH])
    link = create_logos_link(note.resource_id)
    if link:
        parts.append(link)
    return " | ".join(parts)
