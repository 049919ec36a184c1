"""Error types raised by the domain model and the local cache adapter."""

from typing import Literal


class GranolaError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


class MeetingNotFoundError(GranolaError):
    def __init__(self, meeting_id: str):
        super().__init__(f"meeting not found: {meeting_id}")
        self.meeting_id = meeting_id


class TranscriptNotReadyError(GranolaError):
    def __init__(self, meeting_id: str):
        super().__init__(f"transcript not yet available: {meeting_id}")
        self.meeting_id = meeting_id


class MeetingValidationError(GranolaError):
    """A record violates a domain invariant."""


class InvalidMeetingIDError(MeetingValidationError):
    def __init__(self) -> None:
        super().__init__("meeting id must not be empty")


class InvalidTitleError(MeetingValidationError):
    def __init__(self) -> None:
        super().__init__("meeting title must not be empty")


class InvalidDatetimeError(MeetingValidationError):
    def __init__(self) -> None:
        super().__init__("meeting datetime must be set")


class InvalidActionItemIDError(MeetingValidationError):
    def __init__(self) -> None:
        super().__init__("action item id must not be empty")


class InvalidActionItemTextError(MeetingValidationError):
    def __init__(self) -> None:
        super().__init__("action item text must not be empty")


# ---------------------------------------------------------------------------
# Cache source errors
# ---------------------------------------------------------------------------

CorruptStage = Literal["read", "envelope", "empty", "state"]


class SourceError(GranolaError):
    """The cache file could not be turned into a snapshot."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class SourceNotFoundError(SourceError):
    """The cache file does not exist (the desktop app has never synced)."""

    def __init__(self, path: str):
        super().__init__(f"cache file not found: {path}", path)


class SourceCorruptError(SourceError):
    """The cache file exists but is unreadable or malformed.

    ``stage`` names the decoding step that failed: ``read`` (I/O),
    ``envelope`` (outer ``{"cache": ...}`` object), ``empty`` (blank
    ``cache`` string) or ``state`` (the inner JSON document).
    """

    def __init__(self, path: str, stage: CorruptStage, detail: str = ""):
        message = f"cache file is corrupt or unreadable ({stage}): {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, path)
        self.stage = stage
