"""Configuration helpers for the note synchroniser."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

APP_DIR = Path.home() / ".logos_notes"
CONFIG_FILE = APP_DIR / "config.json"

# Preference names used by the original extension, mapped to field names.
_ALIASES = {
    "obsidianVaultPath": "output_dir",
    "vault": "output_dir",
    "excludedResources": "excluded_resources",
    "includeHighlightColor": "include_highlight_color",
    "readwiseToken": "readwise_token",
    "syncToReadwise": "sync_to_readwise",
    "autoSyncEnabled": "auto_sync_enabled",
}


def expand_path(value: Path | str) -> Path:
    return Path(value).expanduser()


def parse_excluded(value: Any) -> Tuple[str, ...]:
    """Turn a comma-separated string or a list into a tuple of resource ids."""

    if not value:
        return ()
    items: Iterable[Any] = value.split(",") if isinstance(value, str) else value
    return tuple(item for item in (str(raw).strip() for raw in items) if item)


@dataclass(frozen=True)
class SyncConfig:
    """Holds configuration for syncing notes."""

    output_dir: Optional[Path] = None
    excluded_resources: Tuple[str, ...] = field(default_factory=tuple)
    include_highlight_color: bool = True
    readwise_token: str = ""
    sync_to_readwise: bool = False
    auto_sync_enabled: bool = False
    readwise_max_retries: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "SyncConfig":
        normalised = {_ALIASES.get(key, key): value for key, value in data.items()}
        kwargs: Dict[str, Any] = {}
        if normalised.get("output_dir"):
            kwargs["output_dir"] = Path(normalised["output_dir"])
        if "excluded_resources" in normalised:
            kwargs["excluded_resources"] = parse_excluded(normalised["excluded_resources"])
        if "include_highlight_color" in normalised:
            kwargs["include_highlight_color"] = bool(normalised["include_highlight_color"])
        if normalised.get("readwise_token"):
            kwargs["readwise_token"] = str(normalised["readwise_token"]).strip()
        if "sync_to_readwise" in normalised:
            kwargs["sync_to_readwise"] = bool(normalised["sync_to_readwise"])
        if "auto_sync_enabled" in normalised:
            kwargs["auto_sync_enabled"] = bool(normalised["auto_sync_enabled"])
        if normalised.get("readwise_max_retries") is not None:
            kwargs["readwise_max_retries"] = int(normalised["readwise_max_retries"])
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> "SyncConfig":
        """Return a copy with every non-``None`` value in ``changes`` applied."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def load_config(path: Optional[Path]) -> Dict[str, Any]:
    """Load a JSON configuration file if provided."""

    if path is None:
        return {}
    with path.expanduser().resolve().open("r", encoding="utf-8") as handle:
        return json.load(handle)
