"""Message formatting utilities for text output."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from anchor.domain.entities import EntityLink, Message, Segment, SegmentKind
from anchor.domain.services.link_routes import route_for_link
from anchor.domain.services.segment_renderer import render_or_plain


def format_day_label(dt: datetime, today: date) -> str:
    """Format the day a message was sent.

    Args:
        dt: Message timestamp.
        today: Viewer's current date.

    Returns:
        "Today", "Yesterday", or the date as YYYY-MM-DD.
    """
    day = dt.date()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return day.isoformat()


def format_time(dt: datetime) -> str:
    """Format a timestamp as HH:MM."""
    return dt.strftime("%H:%M")


def format_file_size(size: int) -> str:
    """Format a byte count in kilobytes, e.g. "12.3 KB"."""
    return f"{size / 1024:.1f} KB"


def format_segment(segment: Segment) -> str:
    """Format a single segment as markdown-like text.

    Mentions are emphasized, links become ``[label](route)``.
    """
    if segment.kind is SegmentKind.MENTION:
        return f"**{segment.text}**"
    if segment.kind is SegmentKind.LINK and isinstance(segment.span, EntityLink):
        label = segment.text.removeprefix("[").removesuffix("]")
        return f"[{label}]({route_for_link(segment.span)})"
    return segment.text


def format_segments(segments: Iterable[Segment]) -> str:
    """Format rendered segments as one string."""
    return "".join(format_segment(segment) for segment in segments)


def format_message_with_metadata(message: Message) -> str:
    """Format a message with timestamp and author name.

    Args:
        message: The message to format.

    Returns:
        Formatted string like "[2024-01-01 12:00] Ann: Check [Tylenol](/medications/e1)"
    """
    timestamp = message.created_at.strftime("%Y-%m-%d %H:%M")
    text = format_segments(
        render_or_plain(message.body, message.mentions, message.links)
    )
    edited = " (edited)" if message.is_edited else ""
    return f"[{timestamp}] {message.author.name}: {text}{edited}"
