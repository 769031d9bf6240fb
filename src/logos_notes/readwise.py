"""Delivery of highlights to the Readwise API."""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Sequence

import requests

from .models import DeliveryResult, ProcessedNote

logger = logging.getLogger(__name__)

READWISE_API_URL = "https://readwise.io/api/v2/highlights/"
READWISE_AUTH_URL = "https://readwise.io/api/v2/auth/"
BATCH_SIZE = 100
MAX_TEXT_LENGTH = 8191
MAX_TITLE_LENGTH = 511
DEFAULT_RETRY_AFTER = 60
BATCH_PAUSE = 0.5


def to_readwise_highlight(note: ProcessedNote) -> Dict[str, str]:
    highlight = {
        "text": note.text[:MAX_TEXT_LENGTH],
        "title": note.resource_title[:MAX_TITLE_LENGTH],
        "source_type": "logos",
        "category": "books",
        "location_type": "order",
        "highlighted_at": note.created,
        # Readwise deduplicates on this URL.
        "highlight_url": f"logos://note/{note.id}",
    }
    if note.reference:
        highlight["note"] = note.reference
    return highlight


def retry_after_seconds(response: requests.Response) -> int:
    value = response.headers.get("Retry-After")
    try:
        seconds = int(value) if value is not None else DEFAULT_RETRY_AFTER
    except ValueError:
        return DEFAULT_RETRY_AFTER
    return max(0, seconds)


class ReadwiseClient:
    """Send highlight-kind notes to Readwise in batches.

    A 429 response pauses for ``Retry-After`` seconds and resubmits the same
    batch. ``max_retries`` bounds how many times one batch may be resubmitted;
    ``None`` keeps retrying for as long as the service asks.
    """

    def __init__(
        self,
        token: str,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: Optional[int] = None,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        self.token = token
        self._session = session or requests.Session()
        self._sleep = sleep
        self.max_retries = max_retries
        self.batch_size = batch_size

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Token {self.token}",
            "Content-Type": "application/json",
        }

    def send(self, notes: Sequence[ProcessedNote]) -> DeliveryResult:
        if not self.token:
            logger.info("Readwise: no token provided, skipping")
            return DeliveryResult()

        highlights = [note for note in notes if note.kind == "highlight" and note.has_text]
        if not highlights:
            logger.info("Readwise: no highlights to send")
            return DeliveryResult()

        logger.info("Readwise: preparing to send %d highlights", len(highlights))
        batches = [highlights[i : i + self.batch_size] for i in range(0, len(highlights), self.batch_size)]

        sent = 0
        errors = 0
        for number, batch in enumerate(batches, start=1):
            if self._send_batch(number, batch):
                sent += len(batch)
            else:
                errors += len(batch)
            if number < len(batches):
                self._sleep(BATCH_PAUSE)

        logger.info("Readwise: complete. Sent: %d, Errors: %d", sent, errors)
        return DeliveryResult(sent=sent, errors=errors)

    def _send_batch(self, number: int, batch: List[ProcessedNote]) -> bool:
        payload = {"highlights": [to_readwise_highlight(note) for note in batch]}
        attempts = 0
        while True:
            try:
                response = self._session.post(READWISE_API_URL, json=payload, headers=self._headers)
            except requests.RequestException as exc:
                logger.error("Readwise: batch %d request failed: %s", number, exc)
                return False

            if response.ok:
                logger.info("Readwise: sent batch %d, %d highlights", number, len(batch))
                return True

            if response.status_code == 429:
                if self.max_retries is not None and attempts >= self.max_retries:
                    logger.error("Readwise: batch %d still rate limited after %d retries", number, attempts)
                    return False
                attempts += 1
                delay = retry_after_seconds(response)
                logger.warning("Readwise: rate limited, waiting %ds", delay)
                self._sleep(delay)
                continue

            logger.error("Readwise: API error %s: %s", response.status_code, response.text)
            return False


def send_to_readwise(notes: Sequence[ProcessedNote], token: str, **kwargs) -> DeliveryResult:
    return ReadwiseClient(token, **kwargs).send(notes)


def verify_readwise_token(token: str, session: Optional[requests.Session] = None) -> bool:
    session = session or requests.Session()
    try:
        response = session.get(READWISE_AUTH_URL, headers={"Authorization": f"Token {token}"})
    except requests.RequestException:
        logger.warning("Readwise: token check failed", exc_info=True)
        return False
    return response.ok
