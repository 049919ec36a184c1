"""Shared fixtures for tests."""

import copy
import json
from collections.abc import Callable
from pathlib import Path

import pytest

from granola_localcache.cache import CacheReader
from granola_localcache.repository import CacheRepository

# Sample data matching Granola's real cache layout: documents keyed by id,
# attendee metadata in "meetingsMetadata", transcripts in both shapes.
SAMPLE_STATE: dict = {
    "documents": {
        "mtg-1": {
            "id": "mtg-1",
            "title": "Morning Standup",
            "created_at": "2025-01-15T09:00:00Z",
            "updated_at": "2025-01-15T09:30:00Z",
            "last_viewed_panel": {"type": "doc", "content": []},
            "notes_prosemirror": {
                "type": "doc",
                "content": [
                    {
                        "type": "paragraph",
                        "content": [{"type": "text", "text": "Notes for standup"}],
                    }
                ],
            },
        },
        "mtg-2": {
            "id": "mtg-2",
            "title": "Sprint Review",
            "created_at": "2025-01-16T14:00:00Z",
            "updated_at": "2025-01-16T15:00:00Z",
            "notes_prosemirror": None,
        },
        "mtg-3": {
            "id": "mtg-3",
            "title": "1:1 with Manager",
            "created_at": "2025-01-14T11:00:00Z",
            "updated_at": "2025-01-14T11:30:00Z",
        },
    },
    "meetingsMetadata": {
        "mtg-1": {
            "organizer": {"name": "Alice", "email": "alice@test.com"},
            "attendees": [
                {"name": "Alice", "email": "alice@test.com"},
                {"name": "Bob", "email": "bob@test.com"},
            ],
            "conference": {"type": "zoom"},
        },
        "mtg-2": {
            "organizer": {"name": "Carol", "email": "carol@test.com"},
            "attendees": [],
            "conference": {"type": "google_meet"},
        },
    },
    "transcripts": {
        "mtg-1": [
            {
                "speaker": "Alice",
                "text": "Good morning team.",
                "source": "microphone",
                "timestamp": "2025-01-15T09:00:30Z",
            },
            {
                "speaker": "Bob",
                "text": "Morning! I worked on the API.",
                "source": "system",
                "timestamp": "2025-01-15T09:01:00Z",
            },
        ],
        "mtg-2": {"segments": []},
    },
}


def _write_cache(path: Path, state: dict) -> Path:
    path.write_text(json.dumps({"cache": json.dumps({"state": state})}))
    return path


@pytest.fixture
def sample_state() -> dict:
    """A fresh, mutable copy of the sample state."""
    return copy.deepcopy(SAMPLE_STATE)


@pytest.fixture
def write_cache(tmp_path: Path) -> Callable[..., Path]:
    """Return a function writing a state dict in Granola's double-encoded format."""

    def _write(state: dict, name: str = "cache-v3.json") -> Path:
        return _write_cache(tmp_path / name, state)

    return _write


@pytest.fixture
def sample_cache_path(tmp_path: Path) -> Path:
    """Write the sample cache to a temp file and return its path."""
    return _write_cache(tmp_path / "cache-v3.json", copy.deepcopy(SAMPLE_STATE))


@pytest.fixture
def repository(sample_cache_path: Path) -> CacheRepository:
    return CacheRepository(CacheReader(sample_cache_path))
