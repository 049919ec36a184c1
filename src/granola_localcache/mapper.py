"""Translation from local cache records to the meeting domain model.

This is the anti-corruption layer: cache structures never leak past it.
Meetings built here are reconstituted, not created, so every domain event
raised while assembling them is cleared before they are returned.
"""

import re
from datetime import datetime, timezone

from .domain import (
    Meeting,
    Participant,
    ParticipantRole,
    Source,
    Summary,
    SummaryKind,
    Transcript,
    Utterance,
)
from .prosemirror import prosemirror_to_plain_text
from .types import CacheConference, CacheDocument, CacheMeetingMeta, CacheTranscript

_CONFERENCE_SOURCES: dict[str, Source] = {
    "zoom": Source.ZOOM,
    "google_meet": Source.GOOGLE_MEET,
    "teams": Source.TEAMS,
}


_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp; ``None`` if invalid or missing an offset.

    Fractions beyond microseconds are truncated.
    """
    match = _RFC3339.fullmatch(value)
    if match is None:
        return None
    date, clock, fraction, offset = match.groups()
    if offset in "Zz":
        offset = "+00:00"
    micros = (fraction or "").ljust(6, "0")[:6]
    try:
        return datetime.fromisoformat(f"{date}T{clock}.{micros}{offset}")
    except ValueError:
        return None


def parse_created_at(doc: CacheDocument) -> datetime:
    """Document creation time, falling back to the current time."""
    return parse_timestamp(doc.created_at) or datetime.now(timezone.utc)


def map_conference_to_source(conference: CacheConference | None) -> Source:
    if conference is None:
        return Source.OTHER
    return _CONFERENCE_SOURCES.get(conference.type, Source.OTHER)


def _map_participants(meta: CacheMeetingMeta) -> list[Participant]:
    participants: list[Participant] = []
    organizer = meta.organizer

    if organizer is not None and (organizer.name or organizer.email):
        participants.append(
            Participant(
                name=organizer.name, email=organizer.email, role=ParticipantRole.HOST
            )
        )

    for attendee in meta.attendees:
        # The organizer is usually listed among the attendees as well
        if (
            organizer is not None
            and attendee.name == organizer.name
            and attendee.email == organizer.email
        ):
            continue
        participants.append(
            Participant(
                name=attendee.name, email=attendee.email, role=ParticipantRole.ATTENDEE
            )
        )

    return participants


def map_document_to_domain(
    doc: CacheDocument, meta: CacheMeetingMeta | None
) -> Meeting:
    """Build a Meeting from a cache document and its optional metadata.

    Raises:
        MeetingValidationError: if the document violates a creation
            invariant (empty id or title).
    """
    source = Source.OTHER
    participants: list[Participant] = []
    if meta is not None:
        source = map_conference_to_source(meta.conference)
        participants = _map_participants(meta)

    meeting = Meeting.create(
        doc.id, doc.title, parse_created_at(doc), source, participants
    )
    meeting.clear_domain_events()

    notes = prosemirror_to_plain_text(doc.notes_prosemirror)
    if notes:
        meeting.attach_summary(
            Summary(meeting_id=doc.id, content=notes, kind=SummaryKind.AUTO)
        )
        meeting.clear_domain_events()

    return meeting


def map_transcript_to_domain(
    meeting_id: str, transcript: CacheTranscript
) -> Transcript | None:
    """Build a Transcript; ``None`` when the cache entry has no segments."""
    if not transcript.segments:
        return None

    utterances = tuple(
        Utterance(
            speaker=segment.speaker,
            text=segment.text,
            timestamp=parse_timestamp(segment.timestamp),
            confidence=0.0,
        )
        for segment in transcript.segments
    )
    return Transcript(meeting_id=meeting_id, utterances=utterances)
