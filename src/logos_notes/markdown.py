"""Markdown rendering for Logos notes."""
from __future__ import annotations

import json
import re
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Sequence

from .links import create_logos_link
from .models import UNKNOWN, ProcessedNote

ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
MAX_FILENAME_LENGTH = 200
TAG = "Logos"


def sanitise_filename(value: str) -> str:
    """Return a filesystem-safe filename derived from ``value``."""

    safe = ILLEGAL_FILENAME_CHARS.sub("", value).strip()
    safe = safe[:MAX_FILENAME_LENGTH]
    return safe or "untitled"


def format_front_matter(metadata: dict) -> str:
    lines: List[str] = ["---"]
    for key, value in metadata.items():
        if isinstance(value, list):
            if not value:
                lines.append(f"{key}: []")
                continue
            lines.append(f"{key}:")
            lines.extend(f"  - {json.dumps(item, ensure_ascii=False)}" for item in value)
        else:
            lines.append(f"{key}: {json.dumps(value, ensure_ascii=False)}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def build_metadata(title: str, resource_id: str, note_count: int, synced: Optional[date] = None) -> dict:
    metadata: dict[str, Any] = {"title": title}
    if resource_id and resource_id != UNKNOWN:
        metadata["logos_resource_id"] = resource_id
        metadata["logos_link"] = create_logos_link(resource_id)
    metadata["synced"] = (synced or datetime.now(timezone.utc).date()).isoformat()
    metadata["note_count"] = note_count
    metadata["tags"] = [TAG]
    return metadata


def render_note(note: ProcessedNote, include_color: bool = False) -> str:
    lines: List[str] = []
    for index, line in enumerate(note.text.split("\n")):
        if index == 0:
            lines.append(f"- {line}")
        elif line.strip():
            lines.append(f"  {line}")

    details: List[str] = []
    if include_color and note.color:
        details.append(f"Color: {note.color}")
    if note.reference:
        details.append(note.reference)
    if note.resource_id and note.resource_id != UNKNOWN:
        details.append(f"[Open in Logos]({create_logos_link(note.resource_id, note.text)})")
    if details:
        lines.append(f"  *{' | '.join(details)}*")

    lines.append("")
    return "\n".join(lines)


def sort_notes(notes: Sequence[ProcessedNote]) -> List[ProcessedNote]:
    """Order notes by creation time; ties keep their incoming order."""

    return sorted(notes, key=lambda note: note.created)


def render_resource_document(
    title: str,
    resource_id: str,
    notes: Sequence[ProcessedNote],
    include_color: bool = False,
    synced: Optional[date] = None,
) -> str:
    front_matter = format_front_matter(build_metadata(title, resource_id, len(notes), synced))
    parts = [front_matter, f"# {title}", ""]
    parts.extend(render_note(note, include_color=include_color) for note in sort_notes(notes))
    return "\n".join(parts)
