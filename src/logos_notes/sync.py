"""The fetch, normalise, write and deliver pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .config import SyncConfig
from .fetchers.logos_notes import LogosNotesFetcher, ProgressCallback
from .parsers import group_by_resource, process_notes
from .readwise import ReadwiseClient
from .storage import write_notes_to_vault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncReport:
    notes_fetched: int = 0
    files_written: int = 0
    notes_written: int = 0
    readwise_sent: int = 0
    readwise_errors: int = 0

    def summary(self) -> str:
        parts: List[str] = []
        if self.notes_written > 0:
            parts.append(f"{self.notes_written} notes to {self.files_written} files")
        if self.readwise_sent > 0:
            parts.append(f"{self.readwise_sent} to Readwise")
        if not parts:
            return "Synced nothing new"
        return "Synced " + ", ".join(parts)


def run_sync(
    config: SyncConfig,
    fetcher: LogosNotesFetcher,
    readwise: Optional[ReadwiseClient] = None,
    on_progress: Optional[ProgressCallback] = None,
    synced: Optional[date] = None,
) -> SyncReport:
    """Run one full sync. Fetch failures propagate before anything is written."""

    raw_notes = fetcher.fetch_all(on_progress)
    notes = process_notes(raw_notes)
    notes_by_resource = group_by_resource(notes)
    logger.info("Grouped %d notes into %d resources", len(notes), len(notes_by_resource))
    logger.info("Excluded resources: %s", ", ".join(config.excluded_resources) or "(none)")

    files_written = 0
    notes_written = 0
    if config.output_dir:
        result = write_notes_to_vault(
            notes_by_resource,
            config.output_dir,
            include_color=config.include_highlight_color,
            excluded_resource_ids=config.excluded_resources,
            synced=synced,
        )
        files_written = result.files_written
        notes_written = result.notes_written

    readwise_sent = 0
    readwise_errors = 0
    if config.sync_to_readwise and config.readwise_token:
        client = readwise or ReadwiseClient(config.readwise_token, max_retries=config.readwise_max_retries)
        delivery = client.send(notes)
        readwise_sent = delivery.sent
        readwise_errors = delivery.errors

    report = SyncReport(
        notes_fetched=len(raw_notes),
        files_written=files_written,
        notes_written=notes_written,
        readwise_sent=readwise_sent,
        readwise_errors=readwise_errors,
    )
    logger.info(
        "Sync complete. Files: %d, Notes: %d, Readwise: %d",
        report.files_written,
        report.notes_written,
        report.readwise_sent,
    )
    return report
