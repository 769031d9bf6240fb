"""End-to-end runs of the sync pipeline against fake HTTP sessions."""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, List

import pytest

from logos_notes.auth import Credential, CredentialStore
from logos_notes.config import SyncConfig
from logos_notes.exceptions import AuthenticationExpiredError
from logos_notes.fetchers import LogosNotesFetcher
from logos_notes.readwise import ReadwiseClient
from logos_notes.sync import SyncReport, run_sync

RESOURCES = [("LLS:A", "Book A"), ("LLS:B", "Book B"), ("LLS:C", "Book C")]


class FakeResponse:
    def __init__(self, payload: object = None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.headers: Dict[str, str] = {}
        self.text = ""

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> object:
        return self._payload


class FakeSession:
    def __init__(self, responses: List[FakeResponse]) -> None:
        self.calls: List[Dict[str, object]] = []
        self._responses = list(responses)

    def post(self, url: str, *, json=None, headers=None) -> FakeResponse:
        self.calls.append({"url": url, "json": json})
        return self._responses.pop(0)


def raw_note(index: int) -> dict:
    resource_id, title = RESOURCES[index % 3]
    preview = "" if index % 10 == 0 else f'<Run Text="Note {index}"/>'
    return {
        "id": f"n{index}",
        "noteKind": "highlight" if index % 2 else "note",
        "created": f"2024-01-01T00:{index // 60:02d}:{index % 60:02d}Z",
        "modified": "2024-02-01T00:00:00Z",
        "anchors": [
            {
                "textRange": {"resourceId": resource_id, "resourceTitle": title, "offset": index, "length": 5},
                "previewRichText": preview,
            }
        ],
    }


def notes_page(indexes: range, more: bool, next_key) -> FakeResponse:
    return FakeResponse(
        {
            "notes": [raw_note(i) for i in indexes],
            "moreNotes": more,
            "nextNoteKey": next_key,
            "noteTotal": 150,
        }
    )


@pytest.fixture
def store(tmp_path: Path) -> CredentialStore:
    credential_store = CredentialStore(tmp_path / "credentials.json")
    credential_store.put(Credential(access_token="cookie"))
    return credential_store


def test_two_pages_three_resources_one_excluded(tmp_path: Path, store: CredentialStore) -> None:
    session = FakeSession([notes_page(range(100), True, "k1"), notes_page(range(100, 150), False, None)])
    config = SyncConfig(output_dir=tmp_path / "vault", excluded_resources=("LLS:C",))

    report = run_sync(config, LogosNotesFetcher(store, session=session), synced=date(2024, 5, 1))

    expected_notes = sum(1 for i in range(150) if i % 10 != 0 and RESOURCES[i % 3][0] != "LLS:C")
    assert report.notes_fetched == 150
    assert report.files_written == 2
    assert report.notes_written == expected_notes
    assert sorted(path.name for path in (tmp_path / "vault").iterdir()) == ["Book A.md", "Book B.md"]
    assert report.readwise_sent == 0


def test_overlapping_pages_are_deduplicated(tmp_path: Path, store: CredentialStore) -> None:
    session = FakeSession([notes_page(range(0, 6), True, "k1"), notes_page(range(3, 9), False, None)])
    config = SyncConfig(output_dir=tmp_path)

    report = run_sync(config, LogosNotesFetcher(store, session=session))

    assert report.notes_fetched == 12
    assert report.notes_written == 8  # n0 has no text


def test_highlights_are_sent_to_readwise(tmp_path: Path, store: CredentialStore) -> None:
    notes_session = FakeSession([notes_page(range(10), False, None)])
    readwise_session = FakeSession([FakeResponse({}, 200)])
    config = SyncConfig(output_dir=tmp_path, readwise_token="tok", sync_to_readwise=True)
    client = ReadwiseClient("tok", session=readwise_session, sleep=lambda _: None)

    report = run_sync(config, LogosNotesFetcher(store, session=notes_session), readwise=client)

    sent_ids = [item["highlight_url"] for item in readwise_session.calls[0]["json"]["highlights"]]
    assert sent_ids == [f"logos://note/n{i}" for i in (1, 3, 5, 7, 9)]
    assert report.readwise_sent == 5
    assert report.summary() == "Synced 9 notes to 3 files, 5 to Readwise"


def test_readwise_skipped_when_disabled(tmp_path: Path, store: CredentialStore) -> None:
    readwise_session = FakeSession([])
    config = SyncConfig(output_dir=tmp_path, readwise_token="tok", sync_to_readwise=False)
    client = ReadwiseClient("tok", session=readwise_session)

    run_sync(config, LogosNotesFetcher(store, session=FakeSession([notes_page(range(3), False, None)])), readwise=client)

    assert readwise_session.calls == []


def test_fetch_failure_writes_nothing(tmp_path: Path, store: CredentialStore) -> None:
    session = FakeSession([notes_page(range(100), True, "k1"), FakeResponse(None, status_code=401)])
    output = tmp_path / "vault"

    with pytest.raises(AuthenticationExpiredError):
        run_sync(SyncConfig(output_dir=output), LogosNotesFetcher(store, session=session))

    assert not output.exists()
    assert store.get() is None


def test_summary_without_changes() -> None:
    assert SyncReport().summary() == "Synced nothing new"
