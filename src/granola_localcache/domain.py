"""Meeting domain model.

The ``Meeting`` aggregate is the consistency boundary for meeting data.
Value objects are frozen pydantic models compared by value; collections
are stored as tuples so callers never share mutable state with an
aggregate.  Aggregate mutations collect domain events which stay pending
until ``clear_domain_events()`` is called.
"""

import datetime as dt
from enum import Enum
from typing import ClassVar, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import (
    InvalidActionItemIDError,
    InvalidActionItemTextError,
    InvalidDatetimeError,
    InvalidMeetingIDError,
    InvalidTitleError,
)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Source(str, Enum):
    """Meeting platform origin."""

    ZOOM = "zoom"
    GOOGLE_MEET = "google_meet"
    TEAMS = "teams"
    OTHER = "other"


class ParticipantRole(str, Enum):
    HOST = "host"
    ATTENDEE = "attendee"


class SummaryKind(str, Enum):
    AUTO = "auto"
    USER_EDITED = "user_edited"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    role: ParticipantRole


class Utterance(BaseModel):
    """A single spoken segment."""

    model_config = ConfigDict(frozen=True)

    speaker: str
    text: str
    timestamp: dt.datetime | None = None
    confidence: float = 0.0


class Transcript(BaseModel):
    """Ordered utterances for one meeting."""

    model_config = ConfigDict(frozen=True)

    meeting_id: str
    utterances: tuple[Utterance, ...] = ()


class Summary(BaseModel):
    model_config = ConfigDict(frozen=True)

    meeting_id: str
    content: str
    kind: SummaryKind


class Metadata(BaseModel):
    """Extensible meeting metadata (tags, links, external references)."""

    model_config = ConfigDict(frozen=True)

    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    external_refs: tuple[tuple[str, str], ...] = ()


# ---------------------------------------------------------------------------
# Domain events
# ---------------------------------------------------------------------------


class DomainEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_name: ClassVar[str] = ""

    meeting_id: str
    occurred_at: dt.datetime = Field(default_factory=_utcnow)


class MeetingCreated(DomainEvent):
    event_name: ClassVar[str] = "meeting.created"

    title: str
    scheduled_at: dt.datetime


class TranscriptUpdated(DomainEvent):
    event_name: ClassVar[str] = "transcript.updated"

    utterance_count: int


class SummaryUpdated(DomainEvent):
    event_name: ClassVar[str] = "summary.updated"

    kind: SummaryKind


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class ActionItem:
    """An action item belonging to a meeting; compared by identity (id)."""

    def __init__(
        self,
        id: str,
        meeting_id: str,
        owner: str,
        text: str,
        due_date: dt.datetime | None = None,
    ):
        if not id:
            raise InvalidActionItemIDError()
        if not text:
            raise InvalidActionItemTextError()
        self.id = id
        self.meeting_id = meeting_id
        self.owner = owner
        self.text = text
        self.due_date = due_date
        self.completed = False

    def complete(self) -> None:
        self.completed = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionItem):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"ActionItem(id={self.id!r}, meeting_id={self.meeting_id!r})"


class Meeting:
    """Aggregate root for meeting data.

    Build instances with :meth:`create`, which enforces the creation
    invariants and records a ``MeetingCreated`` event.
    """

    def __init__(
        self,
        id: str,
        title: str,
        datetime: dt.datetime,
        source: Source,
        participants: tuple[Participant, ...],
    ):
        now = _utcnow()
        self._id = id
        self._title = title
        self._datetime = datetime
        self._source = source
        self._participants = participants
        self._transcript: Transcript | None = None
        self._summary: Summary | None = None
        self._action_items: list[ActionItem] = []
        self._metadata = Metadata()
        self._created_at = now
        self._updated_at = now
        self._events: list[DomainEvent] = []

    @classmethod
    def create(
        cls,
        id: str,
        title: str,
        datetime: dt.datetime | None,
        source: Source,
        participants: list[Participant] | tuple[Participant, ...] = (),
    ) -> "Meeting":
        if not id:
            raise InvalidMeetingIDError()
        if not title:
            raise InvalidTitleError()
        if datetime is None:
            raise InvalidDatetimeError()

        meeting = cls(id, title, datetime, source, tuple(participants))
        meeting._events.append(
            MeetingCreated(meeting_id=id, title=title, scheduled_at=datetime)
        )
        return meeting

    # --- Accessors ---

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def datetime(self) -> dt.datetime:
        return self._datetime

    @property
    def source(self) -> Source:
        return self._source

    @property
    def participants(self) -> tuple[Participant, ...]:
        return self._participants

    @property
    def transcript(self) -> Transcript | None:
        return self._transcript

    @property
    def summary(self) -> Summary | None:
        return self._summary

    @property
    def action_items(self) -> list[ActionItem]:
        return list(self._action_items)

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @property
    def created_at(self) -> dt.datetime:
        return self._created_at

    @property
    def updated_at(self) -> dt.datetime:
        return self._updated_at

    # --- Behaviors ---

    def attach_transcript(self, transcript: Transcript) -> list[DomainEvent]:
        self._transcript = transcript
        self._updated_at = _utcnow()
        event = TranscriptUpdated(
            meeting_id=self._id, utterance_count=len(transcript.utterances)
        )
        self._events.append(event)
        return [event]

    def attach_summary(self, summary: Summary) -> list[DomainEvent]:
        self._summary = summary
        self._updated_at = _utcnow()
        event = SummaryUpdated(meeting_id=self._id, kind=summary.kind)
        self._events.append(event)
        return [event]

    def add_action_item(self, item: ActionItem) -> None:
        self._action_items.append(item)
        self._updated_at = _utcnow()

    def set_metadata(self, metadata: Metadata) -> None:
        self._metadata = metadata
        self._updated_at = _utcnow()

    # --- Domain events ---

    @property
    def domain_events(self) -> list[DomainEvent]:
        return list(self._events)

    def clear_domain_events(self) -> None:
        self._events.clear()

    def __repr__(self) -> str:
        return f"Meeting(id={self._id!r}, title={self._title!r})"


# ---------------------------------------------------------------------------
# Repository port
# ---------------------------------------------------------------------------


class ListFilter(BaseModel):
    """Criteria for querying meetings.  ``limit=0`` means no limit."""

    model_config = ConfigDict(frozen=True)

    since: dt.datetime | None = None
    until: dt.datetime | None = None
    source: Source | None = None
    participant: str | None = None
    query: str | None = None
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)

    @field_validator("since", "until")
    @classmethod
    def _assume_utc(cls, value: dt.datetime | None) -> dt.datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=dt.timezone.utc)
        return value


class MeetingRepository(Protocol):
    """Read-side port for meeting data."""

    def find_by_id(self, meeting_id: str) -> Meeting: ...

    def list_meetings(self, filter: ListFilter) -> list[Meeting]: ...

    def get_transcript(self, meeting_id: str) -> Transcript: ...

    def search_transcripts(self, query: str, filter: ListFilter) -> list[Meeting]: ...

    def get_action_items(self, meeting_id: str) -> list[ActionItem]: ...

    def sync(self, since: dt.datetime | None = None) -> list[DomainEvent]: ...
