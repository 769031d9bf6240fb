"""Small persistent state used by the background sync."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import APP_DIR

logger = logging.getLogger(__name__)

STATE_FILE = APP_DIR / "state.json"
LAST_SYNC_KEY = "last_background_sync"
AUTH_WARNING_KEY = "auth_warning_shown"
AUTH_WARNING_INTERVAL_MS = 24 * 60 * 60 * 1000


class AppState:
    """Timestamps (epoch milliseconds) kept between background runs."""

    def __init__(self, path: Path = STATE_FILE) -> None:
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[int]:
        value = self._load().get(key)
        return int(value) if isinstance(value, (int, float)) else None

    def set(self, key: str, value: int) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def should_warn_about_auth(self, now_ms: int) -> bool:
        """Return ``True`` at most once per day, recording when it does."""

        last = self.get(AUTH_WARNING_KEY)
        if last is not None and last >= now_ms - AUTH_WARNING_INTERVAL_MS:
            return False
        self.set(AUTH_WARNING_KEY, now_ms)
        return True
