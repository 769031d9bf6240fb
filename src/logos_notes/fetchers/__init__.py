"""HTTP fetchers for retrieving notes from remote services."""
from .logos_notes import LogosNotesFetcher, verify_session

__all__ = ["LogosNotesFetcher", "verify_session"]
