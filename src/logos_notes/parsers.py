"""Normalisation of raw Logos note records."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import UNKNOWN, ProcessedNote, RawNote
from .richtext import extract_text_from_rich_text

logger = logging.getLogger(__name__)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _first_anchor(note: RawNote) -> Mapping[str, Any]:
    anchors = note.get("anchors")
    if isinstance(anchors, list) and anchors:
        return _as_mapping(anchors[0])
    return {}


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def deduplicate(notes: Iterable[RawNote]) -> Dict[str, RawNote]:
    """Index raw notes by id, keeping the last record seen for each id.

    The returned mapping is ordered by the first position at which each id
    appeared in ``notes``.
    """

    unique: Dict[str, RawNote] = {}
    for note in notes:
        if not isinstance(note, Mapping):
            continue
        unique[str(note.get("id"))] = note
    return unique


def parse_note(note_id: str, note: RawNote) -> ProcessedNote:
    anchor = _first_anchor(note)
    text_range = _as_mapping(anchor.get("textRange"))
    reference = _as_mapping(text_range.get("reference"))
    style = _as_mapping(note.get("style"))

    text = extract_text_from_rich_text(anchor.get("previewRichText"))
    content_text = extract_text_from_rich_text(note.get("content"))
    if content_text:
        text = content_text

    return ProcessedNote(
        id=note_id,
        kind=str(note.get("noteKind") or ""),
        created=str(note.get("created") or ""),
        modified=str(note.get("modified") or ""),
        text=text,
        reference=_optional_str(reference.get("display")),
        reference_raw=_optional_str(reference.get("raw")),
        resource_id=_optional_str(text_range.get("resourceId")) or UNKNOWN,
        resource_title=(
            _optional_str(text_range.get("resourceFullTitle"))
            or _optional_str(text_range.get("resourceTitle"))
            or UNKNOWN
        ),
        color=_optional_str(style.get("color")),
        offset=_optional_int(text_range.get("offset")),
    )


def process_notes(notes: Iterable[RawNote]) -> List[ProcessedNote]:
    """Flatten raw notes into one :class:`ProcessedNote` per distinct id."""

    unique = deduplicate(notes)
    processed = [parse_note(note_id, note) for note_id, note in unique.items()]
    logger.debug("Processed %d unique notes", len(processed))
    return processed


def group_by_resource(notes: Iterable[ProcessedNote]) -> Dict[str, List[ProcessedNote]]:
    """Group notes by resource id, keeping the order resources were first seen."""

    grouped: Dict[str, List[ProcessedNote]] = {}
    for note in notes:
        grouped.setdefault(note.resource_id, []).append(note)
    return grouped
