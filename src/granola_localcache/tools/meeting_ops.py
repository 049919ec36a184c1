"""MCP tools for Granola meeting data."""

from datetime import datetime
from typing import Annotated, Any, Literal

from fastmcp import Context
from pydantic import Field

from granola_localcache.domain import ListFilter, Meeting, MeetingCreated, Source
from granola_localcache.errors import (
    GranolaError,
    MeetingNotFoundError,
    SourceCorruptError,
    SourceNotFoundError,
    TranscriptNotReadyError,
)
from granola_localcache.repository import CacheRepository
from granola_localcache.server import mcp

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_repository(ctx: Context) -> CacheRepository:
    lc: dict[str, Any] = ctx.request_context.lifespan_context
    return lc["repository"]


def _format_time(dt: datetime | None) -> str:
    if dt is None:
        return "unknown"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def _parse_date(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _error_message(e: GranolaError) -> str:
    if isinstance(e, SourceNotFoundError):
        return f"Granola cache file not found: {e.path}"
    if isinstance(e, SourceCorruptError):
        return f"Granola cache file could not be read ({e.stage}): {e.path}"
    if isinstance(e, MeetingNotFoundError):
        return f"Meeting '{e.meeting_id}' not found"
    if isinstance(e, TranscriptNotReadyError):
        return f"No transcript available for meeting '{e.meeting_id}'"
    return f"Error: {e}"


def _format_meeting_lines(meetings: list[Meeting]) -> list[str]:
    lines: list[str] = []
    for meeting in meetings:
        lines.append(f"• **{meeting.title}** ({meeting.id})")
        lines.append(f"  Date: {_format_time(meeting.datetime)}")
        lines.append(f"  Platform: {meeting.source.value}")
        if meeting.participants:
            names = ", ".join(p.name or p.email for p in meeting.participants)
            lines.append(f"  Participants: {names}")
        lines.append("")
    return lines


_READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": False,
}

SourceName = Literal["zoom", "google_meet", "teams", "other"]


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool(annotations=_READ_ONLY)
def list_meetings(
    ctx: Context,
    since: Annotated[
        str | None, Field(description="Earliest meeting date (ISO format)")
    ] = None,
    until: Annotated[
        str | None, Field(description="Latest meeting date (ISO format)")
    ] = None,
    source: Annotated[
        SourceName | None, Field(description="Meeting platform")
    ] = None,
    participant: Annotated[
        str | None, Field(description="Participant name or email fragment")
    ] = None,
    query: Annotated[str | None, Field(description="Title fragment")] = None,
    limit: Annotated[
        int, Field(description="Maximum number of results", ge=1, le=100)
    ] = 20,
    offset: Annotated[int, Field(description="Results to skip", ge=0)] = 0,
) -> str:
    """List meetings, newest first."""
    try:
        meeting_filter = ListFilter(
            since=_parse_date(since),
            until=_parse_date(until),
            source=Source(source) if source else None,
            participant=participant,
            query=query,
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        return f"Invalid filter: {e}"

    try:
        meetings = _get_repository(ctx).list_meetings(meeting_filter)
    except GranolaError as e:
        return _error_message(e)

    if not meetings:
        return "No meetings found"

    return "\n".join([f"Found {len(meetings)} meeting(s):\n", *_format_meeting_lines(meetings)])


@mcp.tool(annotations=_READ_ONLY)
def get_meeting(
    meeting_id: Annotated[str, Field(description="Meeting ID to retrieve")],
    ctx: Context,
) -> str:
    """Get detailed information about a specific meeting."""
    try:
        meeting = _get_repository(ctx).find_by_id(meeting_id)
    except GranolaError as e:
        return _error_message(e)

    details = [
        f"# Meeting Details: {meeting.title}\n",
        f"**ID:** {meeting.id}",
        f"**Date:** {_format_time(meeting.datetime)}",
        f"**Platform:** {meeting.source.value}",
    ]

    if meeting.participants:
        people = ", ".join(
            f"{p.name or p.email} ({p.role.value})" for p in meeting.participants
        )
        details.append(f"**Participants:** {people}")

    if meeting.transcript is not None:
        details.append(
            f"**Transcript:** Available ({len(meeting.transcript.utterances)} utterances)"
        )

    if meeting.summary is not None:
        details.append("\n## Notes\n")
        details.append(meeting.summary.content)

    return "\n".join(details)


@mcp.tool(annotations=_READ_ONLY)
def get_transcript(
    meeting_id: Annotated[str, Field(description="Meeting ID to get transcript for")],
    ctx: Context,
) -> str:
    """Get the full transcript for a specific meeting."""
    try:
        transcript = _get_repository(ctx).get_transcript(meeting_id)
    except GranolaError as e:
        return _error_message(e)

    speakers = sorted({u.speaker for u in transcript.utterances if u.speaker})
    output = [f"# Transcript: {meeting_id}\n"]
    if speakers:
        output.append(f"**Speakers:** {', '.join(speakers)}")

    output.append("\n## Transcript Content\n")
    for utterance in transcript.utterances:
        speaker = utterance.speaker or "Unknown"
        output.append(f"**{speaker}:** {utterance.text}")

    return "\n".join(output)


@mcp.tool(annotations=_READ_ONLY)
def search_transcripts(
    query: Annotated[str, Field(description="Text to find in titles, transcripts or notes")],
    ctx: Context,
    limit: Annotated[
        int, Field(description="Maximum number of results", ge=1, le=50)
    ] = 10,
) -> str:
    """Search meetings by title, transcript text, or notes."""
    try:
        meetings = _get_repository(ctx).search_transcripts(
            query, ListFilter(limit=limit)
        )
    except GranolaError as e:
        return _error_message(e)

    if not meetings:
        return f"No meetings found matching '{query}'"

    lines = [f"Found {len(meetings)} meeting(s) matching '{query}':\n"]
    lines.extend(_format_meeting_lines(meetings))
    return "\n".join(lines)


@mcp.tool(annotations=_READ_ONLY)
def get_action_items(
    meeting_id: Annotated[str, Field(description="Meeting ID to get action items for")],
    ctx: Context,
) -> str:
    """Get action items recorded for a meeting."""
    items = _get_repository(ctx).get_action_items(meeting_id)
    if not items:
        return f"No action items for meeting '{meeting_id}'"

    lines = [f"# Action Items: {meeting_id}\n"]
    for item in items:
        mark = "x" if item.completed else " "
        owner = f" ({item.owner})" if item.owner else ""
        lines.append(f"- [{mark}] {item.text}{owner}")
    return "\n".join(lines)


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    }
)
def sync_meetings(
    ctx: Context,
    since: Annotated[
        str | None,
        Field(description="Only report updates for meetings created before this date"),
    ] = None,
) -> str:
    """Reload the Granola cache and report new and updated meetings."""
    try:
        since_dt = _parse_date(since)
    except ValueError as e:
        return f"Invalid date: {e}"

    try:
        events = _get_repository(ctx).sync(since_dt)
    except GranolaError as e:
        return _error_message(e)

    created = [e for e in events if isinstance(e, MeetingCreated)]
    updated = [e for e in events if not isinstance(e, MeetingCreated)]

    lines = [
        "# Sync Complete\n",
        f"- **New meetings:** {len(created)}",
        f"- **Updated meetings:** {len(updated)}",
    ]
    for event in created:
        lines.append(f"  • {event.title} ({event.meeting_id})")
    return "\n".join(lines)
