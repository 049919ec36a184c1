"""Meeting repository backed by the Granola desktop app's local cache.

The snapshot is read lazily on first use and kept in memory; only
:meth:`CacheRepository.sync` reloads it.  All filtering happens in memory.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from .cache import CacheReader
from .domain import (
    ActionItem,
    DomainEvent,
    ListFilter,
    Meeting,
    MeetingCreated,
    SummaryKind,
    SummaryUpdated,
    Transcript,
)
from .errors import (
    MeetingNotFoundError,
    MeetingValidationError,
    TranscriptNotReadyError,
)
from .mapper import (
    map_document_to_domain,
    map_transcript_to_domain,
    parse_created_at,
)
from .prosemirror import prosemirror_to_plain_text
from .sync_state import InMemorySyncStateStore, SyncStateStore
from .types import CacheDocument, CacheInner, CacheState, CacheTranscript

logger = logging.getLogger(__name__)


class _ReadWriteLock:
    """Many concurrent readers or one writer.  Waiting writers hold off new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


def matches_filter(meeting: Meeting, filter: ListFilter) -> bool:
    """Check a meeting against the filter criteria (all bounds inclusive)."""
    if filter.since is not None and meeting.datetime < filter.since:
        return False
    if filter.until is not None and meeting.datetime > filter.until:
        return False
    if filter.source is not None and meeting.source != filter.source:
        return False
    if filter.participant is not None:
        needle = filter.participant.lower()
        if not any(
            needle in p.name.lower() or needle in p.email.lower()
            for p in meeting.participants
        ):
            return False
    if filter.query is not None and filter.query.lower() not in meeting.title.lower():
        return False
    return True


def _sort_and_paginate(meetings: list[Meeting], filter: ListFilter) -> list[Meeting]:
    meetings = sorted(meetings, key=lambda m: m.datetime, reverse=True)
    if filter.offset >= len(meetings):
        return []
    meetings = meetings[filter.offset :]
    if filter.limit > 0:
        meetings = meetings[: filter.limit]
    return meetings


def _transcript_contains(transcript: CacheTranscript, needle: str) -> bool:
    return any(needle in segment.text.lower() for segment in transcript.segments)


class CacheRepository:
    """Read-side meeting repository over a :class:`CacheReader`.

    Args:
        reader: Reader for the cache file.
        sync_state: Where :meth:`sync` keeps the document id -> updated_at
            map between calls.  Defaults to process memory.
    """

    def __init__(self, reader: CacheReader, sync_state: SyncStateStore | None = None):
        self._reader = reader
        self._sync_state = sync_state or InMemorySyncStateStore()
        self._lock = _ReadWriteLock()
        self._state: CacheState | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> CacheState:
        with self._lock.read():
            if self._state is not None:
                return self._state
        with self._lock.write():
            if self._state is None:
                self._state = self._reader.read()
                logger.info(
                    "Loaded %d documents from %s",
                    len(self._state.state.documents),
                    self._reader.path,
                )
            return self._state

    @contextmanager
    def _snapshot(self) -> Iterator[CacheInner]:
        """Load if needed, then hold the read lock over the current snapshot."""
        loaded = self._ensure_loaded()
        with self._lock.read():
            # A sync may have swapped in a newer snapshot since the load.
            yield (self._state or loaded).state

    def _map_documents(
        self, inner: CacheInner, filter: ListFilter
    ) -> Iterator[tuple[str, CacheDocument, Meeting]]:
        """Map every document passing ``filter``; invalid documents are skipped."""
        for doc_id, doc in inner.documents.items():
            try:
                meeting = map_document_to_domain(
                    doc, inner.meetings_metadata.get(doc_id)
                )
            except MeetingValidationError as e:
                logger.warning("Skipping invalid document %s: %s", doc_id, e)
                continue
            if matches_filter(meeting, filter):
                yield doc_id, doc, meeting

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_id(self, meeting_id: str) -> Meeting:
        """Return one meeting with its transcript attached when available.

        Raises:
            MeetingNotFoundError: no document has this id.
            MeetingValidationError: the document violates a domain invariant.
            SourceError: the cache file is missing or corrupt.
        """
        with self._snapshot() as inner:
            doc = inner.documents.get(meeting_id)
            if doc is None:
                raise MeetingNotFoundError(meeting_id)

            meeting = map_document_to_domain(doc, inner.meetings_metadata.get(meeting_id))

            cached = inner.transcripts.get(meeting_id)
            if cached is not None:
                transcript = map_transcript_to_domain(meeting_id, cached)
                if transcript is not None:
                    meeting.attach_transcript(transcript)
                    meeting.clear_domain_events()

        return meeting

    def list_meetings(self, filter: ListFilter | None = None) -> list[Meeting]:
        """List meetings newest first.  Transcripts are not attached."""
        filter = filter or ListFilter()
        with self._snapshot() as inner:
            meetings = [m for _, _, m in self._map_documents(inner, filter)]
        return _sort_and_paginate(meetings, filter)

    def get_transcript(self, meeting_id: str) -> Transcript:
        """Return the transcript for a meeting.

        Raises:
            MeetingNotFoundError: no document has this id.
            TranscriptNotReadyError: no transcript entry, or an empty one.
        """
        with self._snapshot() as inner:
            if meeting_id not in inner.documents:
                raise MeetingNotFoundError(meeting_id)

            cached = inner.transcripts.get(meeting_id)
            transcript = (
                map_transcript_to_domain(meeting_id, cached) if cached is not None else None
            )

        if transcript is None:
            raise TranscriptNotReadyError(meeting_id)
        return transcript

    def search_transcripts(
        self, query: str, filter: ListFilter | None = None
    ) -> list[Meeting]:
        """Find meetings whose title, transcript or notes contain ``query``."""
        filter = filter or ListFilter()
        needle = query.lower()
        matched: list[Meeting] = []

        with self._snapshot() as inner:
            for doc_id, doc, meeting in self._map_documents(inner, filter):
                if needle in meeting.title.lower():
                    matched.append(meeting)
                    continue

                cached = inner.transcripts.get(doc_id)
                if cached is not None and _transcript_contains(cached, needle):
                    matched.append(meeting)
                    continue

                notes = prosemirror_to_plain_text(doc.notes_prosemirror)
                if needle in notes.lower():
                    matched.append(meeting)

        return _sort_and_paginate(matched, filter)

    def get_action_items(self, meeting_id: str) -> list[ActionItem]:
        # The local cache file carries no action items.
        return []

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync(self, since: datetime | None = None) -> list[DomainEvent]:
        """Reload the cache file and report what changed since the last sync.

        Documents created before ``since`` produce ``SummaryUpdated`` when
        their ``updated_at`` is new or differs from the previous sync.  All
        other documents produce ``MeetingCreated`` the first time they are
        seen.  The tracking map is replaced wholesale afterwards.
        """
        if since is not None and since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)

        with self._lock.write():
            self._state = self._reader.read()
            documents = self._state.state.documents
            previous = self._sync_state.load()
            current: dict[str, str] = {}
            events: list[DomainEvent] = []

            for doc_id, doc in documents.items():
                current[doc_id] = doc.updated_at
                created_at = parse_created_at(doc)

                if since is not None and created_at < since:
                    if doc_id not in previous or previous[doc_id] != doc.updated_at:
                        events.append(
                            SummaryUpdated(meeting_id=doc_id, kind=SummaryKind.AUTO)
                        )
                    continue

                if doc_id not in previous:
                    events.append(
                        MeetingCreated(
                            meeting_id=doc_id, title=doc.title, scheduled_at=created_at
                        )
                    )

            self._sync_state.save(current)

        logger.info(
            "Synced %d documents from %s: %d events",
            len(current),
            self._reader.path,
            len(events),
        )
        return events
