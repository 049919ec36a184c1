"""Storage for the sync change-tracking map (document id -> updated_at).

The repository replaces the whole map on every sync.  Keeping it behind a
store lets callers choose whether a process restart forgets what was
already seen (:class:`InMemorySyncStateStore`) or not
(:class:`JsonFileSyncStateStore`).
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class SyncStateStore(Protocol):
    def load(self) -> dict[str, str]: ...

    def save(self, seen: dict[str, str]) -> None: ...


class InMemorySyncStateStore:
    """Process-local state; the first sync after a restart sees every document as new."""

    def __init__(self, seen: dict[str, str] | None = None):
        self._seen = dict(seen or {})

    def load(self) -> dict[str, str]:
        return dict(self._seen)

    def save(self, seen: dict[str, str]) -> None:
        self._seen = dict(seen)


class JsonFileSyncStateStore:
    """Sync state persisted to a JSON file.

    File layout::

        {
          "sync_metadata": {"saved_at": "...", "document_count": 3, "version": 1},
          "documents": {"<doc id>": "<updated_at>", ...}
        }
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except ValueError as e:
            logger.warning(
                "Ignoring unreadable sync state %s, next sync starts fresh: %s",
                self._path,
                e,
            )
            return {}

        documents = raw.get("documents", {}) if isinstance(raw, dict) else {}
        if not isinstance(documents, dict):
            return {}
        return {str(k): str(v) for k, v in documents.items()}

    def save(self, seen: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        output = {
            "sync_metadata": {
                "saved_at": datetime.now(timezone.utc).isoformat(),
                "document_count": len(seen),
                "version": 1,
            },
            "documents": seen,
        }
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(output, f, ensure_ascii=False)
        temp_path.replace(self._path)
