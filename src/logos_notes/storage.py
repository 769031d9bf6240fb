"""Helpers for persisting notes to Markdown files."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Collection, List, Mapping, Optional, Sequence

from .config import expand_path
from .markdown import render_resource_document, sanitise_filename
from .models import ProcessedNote, SyncResult

logger = logging.getLogger(__name__)


class ResourceFile:
    """Represents an on-disk Markdown file for one resource's notes."""

    def __init__(self, path: Path, title: str, resource_id: str) -> None:
        self.path = path
        self.title = title
        self.resource_id = resource_id

    def write(self, notes: Sequence[ProcessedNote], include_color: bool = False, synced: Optional[date] = None) -> None:
        content = render_resource_document(
            self.title, self.resource_id, notes, include_color=include_color, synced=synced
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content, encoding="utf-8")


def build_resource_filename(output_dir: Path, title: str) -> Path:
    return output_dir / f"{sanitise_filename(title)}.md"


def notes_with_text(notes: Sequence[ProcessedNote]) -> List[ProcessedNote]:
    return [note for note in notes if note.has_text]


def write_notes_to_vault(
    notes_by_resource: Mapping[str, Sequence[ProcessedNote]],
    output_dir: Path | str,
    include_color: bool = False,
    excluded_resource_ids: Collection[str] = (),
    synced: Optional[date] = None,
) -> SyncResult:
    """Write one Markdown file per resource and return what was written.

    Each file is fully rewritten. Excluded resources, and resources without any
    note text, are skipped and any existing file for them is left alone.
    """

    directory = expand_path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    excluded = set(excluded_resource_ids)

    files_written = 0
    notes_written = 0
    for resource_id, notes in notes_by_resource.items():
        if resource_id in excluded:
            logger.debug("Skipping excluded resource %s", resource_id)
            continue

        kept = notes_with_text(notes)
        if not kept:
            continue

        title = kept[0].resource_title
        resource_file = ResourceFile(build_resource_filename(directory, title), title, resource_id)
        try:
            resource_file.write(kept, include_color=include_color, synced=synced)
        except OSError as exc:
            logger.error("Failed to write %s: %s", resource_file.path, exc)
            continue

        files_written += 1
        notes_written += len(kept)
        logger.info("Wrote %d note(s) to %s", len(kept), resource_file.path)

    return SyncResult(files_written=files_written, notes_written=notes_written)
