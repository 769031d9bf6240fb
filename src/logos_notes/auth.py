"""Storage for the Logos session credential."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import APP_DIR

logger = logging.getLogger(__name__)

CREDENTIAL_FILE = APP_DIR / "credentials.json"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Credential:
    """An opaque session token; ``expires_at`` is in epoch milliseconds."""

    access_token: str
    access_token_secret: str = ""
    expires_at: Optional[int] = None

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at is not None and self.expires_at < now_ms


class CredentialStore:
    """Keeps one :class:`Credential` in a JSON file."""

    def __init__(self, path: Path = CREDENTIAL_FILE, clock: Callable[[], int] = _now_ms) -> None:
        self.path = path
        self._clock = clock

    def get(self) -> Optional[Credential]:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            credential = Credential(
                access_token=str(raw["accessToken"]),
                access_token_secret=str(raw.get("accessTokenSecret") or ""),
                expires_at=int(raw["expiresAt"]) if raw.get("expiresAt") is not None else None,
            )
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, exc)
            return None

        if credential.is_expired(self._clock()):
            logger.info("Stored credential expired; clearing it")
            self.clear()
            return None
        return credential

    def put(self, credential: Credential) -> None:
        data = asdict(credential)
        payload = {
            "accessToken": data["access_token"],
            "accessTokenSecret": data["access_token_secret"],
        }
        if credential.expires_at is not None:
            payload["expiresAt"] = credential.expires_at
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def is_authenticated(self) -> bool:
        return self.get() is not None
