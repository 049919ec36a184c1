"""Tests for cache file reading and decoding."""

import json
from pathlib import Path

import pytest

from granola_localcache.cache import CacheReader
from granola_localcache.errors import SourceCorruptError, SourceNotFoundError
from granola_localcache.types import CacheTranscript


class TestCacheReader:
    """Test CacheReader with valid and damaged files."""

    def test_reads_sample(self, sample_cache_path: Path):
        state = CacheReader(sample_cache_path).read()

        assert set(state.state.documents) == {"mtg-1", "mtg-2", "mtg-3"}
        assert set(state.state.meetings_metadata) == {"mtg-1", "mtg-2"}
        assert set(state.state.transcripts) == {"mtg-1", "mtg-2"}

    def test_document_fields(self, sample_cache_path: Path):
        doc = CacheReader(sample_cache_path).read().state.documents["mtg-1"]

        assert doc.id == "mtg-1"
        assert doc.title == "Morning Standup"
        assert doc.created_at == "2025-01-15T09:00:00Z"
        assert doc.updated_at == "2025-01-15T09:30:00Z"
        assert doc.notes_prosemirror["type"] == "doc"
        assert doc.last_viewed_panel == {"type": "doc", "content": []}

    def test_metadata_fields(self, sample_cache_path: Path):
        meta = CacheReader(sample_cache_path).read().state.meetings_metadata["mtg-1"]

        assert meta.organizer is not None
        assert meta.organizer.email == "alice@test.com"
        assert [a.name for a in meta.attendees] == ["Alice", "Bob"]
        assert meta.conference is not None
        assert meta.conference.type == "zoom"

    def test_both_transcript_shapes(self, sample_cache_path: Path):
        transcripts = CacheReader(sample_cache_path).read().state.transcripts

        assert [s.speaker for s in transcripts["mtg-1"].segments] == ["Alice", "Bob"]
        assert transcripts["mtg-2"].segments == []

    def test_missing_file(self, tmp_path: Path):
        path = tmp_path / "does_not_exist.json"

        with pytest.raises(SourceNotFoundError) as exc:
            CacheReader(path).read()
        assert exc.value.path == str(path)

    def test_directory_is_corrupt(self, tmp_path: Path):
        with pytest.raises(SourceCorruptError) as exc:
            CacheReader(tmp_path).read()
        assert exc.value.stage == "read"

    def test_invalid_outer_json(self, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text("not json at all {{{")

        with pytest.raises(SourceCorruptError) as exc:
            CacheReader(bad).read()
        assert exc.value.stage == "envelope"

    def test_cache_field_not_a_string(self, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"cache": {"state": {}}}))

        with pytest.raises(SourceCorruptError) as exc:
            CacheReader(bad).read()
        assert exc.value.stage == "envelope"

    @pytest.mark.parametrize("payload", [{"cache": ""}, {"other": "x"}])
    def test_empty_cache_field(self, tmp_path: Path, payload: dict):
        bad = tmp_path / "empty.json"
        bad.write_text(json.dumps(payload))

        with pytest.raises(SourceCorruptError) as exc:
            CacheReader(bad).read()
        assert exc.value.stage == "empty"

    def test_invalid_inner_json(self, tmp_path: Path):
        bad = tmp_path / "inner.json"
        bad.write_text(json.dumps({"cache": "{not valid"}))

        with pytest.raises(SourceCorruptError) as exc:
            CacheReader(bad).read()
        assert exc.value.stage == "state"

    def test_missing_state_key_is_empty(self, tmp_path: Path):
        path = tmp_path / "nostate.json"
        path.write_text(json.dumps({"cache": json.dumps({"version": 3})}))

        state = CacheReader(path).read()
        assert state.state.documents == {}
        assert state.state.transcripts == {}

    def test_null_values_tolerated(self, sample_state: dict, write_cache):
        state = sample_state
        state["documents"]["mtg-3"]["updated_at"] = None
        state["meetingsMetadata"]["mtg-2"]["attendees"] = None
        state["meetingsMetadata"]["mtg-2"]["conference"] = None
        state["transcripts"] = None
        path = write_cache(state, "nulls.json")

        inner = CacheReader(path).read().state
        assert inner.documents["mtg-3"].updated_at == ""
        assert inner.meetings_metadata["mtg-2"].attendees == []
        assert inner.meetings_metadata["mtg-2"].conference is None
        assert inner.transcripts == {}


class TestCacheTranscript:
    def test_array_shape(self):
        t = CacheTranscript.model_validate([{"speaker": "A", "text": "hi"}])
        assert t.segments[0].text == "hi"

    def test_object_shape(self):
        t = CacheTranscript.model_validate({"segments": [{"speaker": "A", "text": "hi"}]})
        assert t.segments[0].speaker == "A"

    def test_start_timestamp_key(self):
        t = CacheTranscript.model_validate(
            [{"text": "hi", "start_timestamp": "2025-01-15T09:00:30Z"}]
        )
        assert t.segments[0].timestamp == "2025-01-15T09:00:30Z"

    @pytest.mark.parametrize("raw", ["just a string", 42, {"segments": "nope"}])
    def test_unrecognised_shape_is_empty(self, raw):
        assert CacheTranscript.model_validate(raw).segments == []
