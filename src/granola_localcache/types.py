"""Data models for the Granola local cache file.

The file is double-JSON encoded: the outer object has a ``cache`` field
whose value is a JSON *string*, and that string decodes to a
:class:`CacheState` holding documents, meeting metadata and transcripts.
"""

import logging
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


def null_as(empty: Any) -> BeforeValidator:
    def _convert(value: Any) -> Any:
        return empty() if value is None else value

    return BeforeValidator(_convert)


# JSON null decodes to the empty value instead of failing the snapshot
NullableStr = Annotated[str, null_as(str)]


class CacheEnvelope(BaseModel):
    """Outermost structure of ``cache-v3.json``."""

    cache: str = ""


class CacheAttendee(BaseModel):
    name: NullableStr = ""
    email: NullableStr = ""


class CacheConference(BaseModel):
    type: NullableStr = ""


class CacheMeetingMeta(BaseModel):
    """Attendees and conferencing info for one meeting."""

    attendees: Annotated[list[CacheAttendee], null_as(list)] = []
    organizer: CacheAttendee | None = None
    conference: CacheConference | None = None


class CacheDocument(BaseModel):
    """A single meeting/note document."""

    id: NullableStr = ""
    title: NullableStr = ""
    created_at: NullableStr = ""
    updated_at: NullableStr = ""
    last_viewed_panel: Any = None
    notes_prosemirror: Any = None


class CacheSegment(BaseModel):
    """A single spoken segment in a transcript."""

    speaker: NullableStr = ""
    text: NullableStr = ""
    source: NullableStr = ""
    timestamp: NullableStr = Field(
        default="", validation_alias=AliasChoices("timestamp", "start_timestamp")
    )


class CacheTranscript(BaseModel):
    """All transcript segments for a meeting.

    Granola stores transcripts in two shapes:

    - a bare array: ``[{segment}, {segment}, ...]``
    - an object: ``{"segments": [{segment}, ...]}``

    The array shape is tried first.  Data matching neither shape decodes
    to an empty transcript rather than failing the whole snapshot.
    """

    segments: list[CacheSegment] = []

    @model_validator(mode="wrap")
    @classmethod
    def _accept_either_shape(cls, data: Any, handler: Any) -> "CacheTranscript":
        if isinstance(data, list):
            data = {"segments": data}
        try:
            return handler(data)
        except ValidationError as e:
            logger.debug("Unrecognised transcript shape, treating as empty: %s", e)
            return cls()


class CacheInner(BaseModel):
    """The three collections held in the cache."""

    model_config = ConfigDict(populate_by_name=True)

    documents: dict[str, Annotated[CacheDocument, null_as(dict)]] = {}
    meetings_metadata: dict[str, Annotated[CacheMeetingMeta, null_as(dict)]] = Field(
        default={}, alias="meetingsMetadata"
    )
    transcripts: dict[str, CacheTranscript] = {}

    @field_validator("documents", "meetings_metadata", "transcripts", mode="before")
    @classmethod
    def _null_collections(cls, value: Any) -> Any:
        return {} if value is None else value


class CacheState(BaseModel):
    """Decoded inner JSON of the cache envelope."""

    state: Annotated[CacheInner, null_as(dict)] = Field(default_factory=CacheInner)
