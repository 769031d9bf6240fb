"""Fetch notes from the Logos web app notes API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

import requests

from logos_notes.auth import Credential, CredentialStore
from logos_notes.exceptions import AuthenticationError, AuthenticationExpiredError, TransportError
from logos_notes.models import RawNote

logger = logging.getLogger(__name__)

APP_URL = "https://app.logos.com"
NOTES_API_URL = f"{APP_URL}/api/app/notes-api/notes/find"
PAGE_SIZE = 100

NOTE_FIELDS = [
    "id",
    "revision",
    "created",
    "createdBy",
    "modified",
    "isTrashed",
    "isDeleted",
    "noteKind",
    "content",
    "style",
    "anchors",
    "tags",
]

FACETS = [
    {"field": "noteKind"},
    {"field": "anchorResource", "termLimit": 30},
    {"field": "anchorBibleBook", "termLimit": 120},
    {"field": "anchorDataType", "termLimit": 30},
]

ProgressCallback = Callable[[int, int], None]


def timezone_offset_minutes() -> int:
    """Minutes to add to local time to reach UTC (positive west of Greenwich)."""

    offset = datetime.now().astimezone().utcoffset()
    return -int(offset.total_seconds() // 60) if offset else 0


def default_headers(token: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
        "Origin": APP_URL,
        "Referer": f"{APP_URL}/tools/notes",
        "Cookie": f"auth={token}",
    }


@dataclass
class _ApiRequest:
    """Internal structure describing a paginated notes request."""

    note_key: Optional[str] = None
    page_size: int = PAGE_SIZE

    def to_payload(self) -> Dict[str, object]:
        return {
            "request": {
                "start": {"noteKey": self.note_key} if self.note_key else None,
                "sort": "modifiedDesc",
                "filters": [],
                "filterNoteIds": None,
                "query": None,
                "facetFindText": None,
                "previousNoteLimit": self.page_size,
                "noteLimit": self.page_size,
                "facets": FACETS,
                "noteTotalField": True,
                "noteFields": NOTE_FIELDS,
                "tzoMinutes": timezone_offset_minutes(),
                "userLanguage": "en-US",
            }
        }


@dataclass
class NotesPage:
    notes: List[RawNote]
    more_notes: bool
    next_note_key: Optional[str]
    note_total: int


class LogosNotesFetcher:
    """Retrieve every note from the Logos notes service.

    Pages are requested one at a time, newest modification first, following
    the ``nextNoteKey`` cursor until the service reports no more notes.

    Parameters
    ----------
    store:
        Credential store holding the ``auth`` session cookie value. The
        credential is re-read before every page and cleared when the service
        rejects it.
    session:
        Optional ``requests.Session`` instance. Primarily intended for tests so
        that HTTP requests can be mocked.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        session: Optional[requests.Session] = None,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self.store = store
        self._session = session or requests.Session()
        self.page_size = page_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def fetch_all(self, on_progress: Optional[ProgressCallback] = None) -> List[RawNote]:
        """Return all notes, or raise without returning any on failure."""

        if self.store.get() is None:
            raise AuthenticationError("Not authenticated. Please login first.")

        request = _ApiRequest(page_size=self.page_size)
        all_notes: List[RawNote] = []
        page_number = 0

        while True:
            page_number += 1
            credential = self.store.get()
            if credential is None:
                raise AuthenticationExpiredError("Credential was removed while fetching notes.")

            logger.debug("Fetching page %d (cursor=%s)", page_number, request.note_key)
            page = self._fetch_page(credential, request)
            all_notes.extend(page.notes)
            logger.info(
                "Page %d returned %d notes (total %d, more=%s)",
                page_number,
                len(page.notes),
                page.note_total,
                page.more_notes,
            )

            if on_progress is not None:
                on_progress(len(all_notes), page.note_total)

            if not page.more_notes:
                break
            if not page.next_note_key:
                logger.warning("Service reported more notes without a cursor; stopping")
                break
            request.note_key = page.next_note_key

        logger.info("Fetched %d notes in %d page(s)", len(all_notes), page_number)
        return all_notes

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch_page(self, credential: Credential, request: _ApiRequest) -> NotesPage:
        try:
            response = self._session.post(
                NOTES_API_URL,
                json=request.to_payload(),
                headers=default_headers(credential.access_token),
            )
        except requests.RequestException as exc:
            raise TransportError(f"Notes request failed: {exc}") from exc

        self._ensure_success(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Received invalid JSON from the notes API", response.status_code) from exc
        if not isinstance(payload, dict):
            raise TransportError("Unexpected response format from the notes API", response.status_code)

        notes = payload.get("notes") or []
        next_key = payload.get("nextNoteKey")
        try:
            if not isinstance(notes, list):
                raise TypeError(f"notes is {type(notes).__name__}, expected list")
            note_total = int(payload.get("noteTotal") or 0)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Malformed notes page: {exc}", response.status_code) from exc
        return NotesPage(
            notes=[note for note in notes if isinstance(note, dict)],
            more_notes=bool(payload.get("moreNotes")),
            next_note_key=str(next_key) if next_key else None,
            note_total=note_total,
        )

    def _ensure_success(self, response: requests.Response) -> None:
        status = response.status_code
        if status in (401, 403):
            logger.error("Notes API rejected the credential (%s); clearing it", status)
            self.store.clear()
            raise AuthenticationExpiredError("Authentication expired. Please login again.")
        if status >= 400:
            body = response.text
            logger.error("Notes API error %s: %s", status, body)
            raise TransportError(f"API error: {status} - {body}", status, body)


def verify_session(token: str, session: Optional[requests.Session] = None) -> str:
    """Probe the notes API with ``token``.

    Returns ``"valid"``, ``"rejected"`` for 401/403, or ``"unknown"`` for any
    other status.
    """

    session = session or requests.Session()
    payload = {
        "request": {
            "noteLimit": 1,
            "facets": [{"field": "noteKind"}],
            "noteTotalField": True,
            "noteFields": ["id", "noteKind"],
            "tzoMinutes": timezone_offset_minutes(),
            "userLanguage": "en-US",
        }
    }
    try:
        response = session.post(NOTES_API_URL, json=payload, headers=default_headers(token))
    except requests.RequestException as exc:
        raise TransportError(f"Session check failed: {exc}") from exc

    if response.ok:
        return "valid"
    if response.status_code in (401, 403):
        return "rejected"
    return "unknown"
