"""View models for displaying messages."""

from dataclasses import dataclass, field
from datetime import date

from anchor.domain.entities import AttachmentRecord, FeedItem, Message, Segment
from anchor.domain.services import render_or_plain
from anchor.domain.services.message_formatter import (
    format_day_label,
    format_file_size,
    format_time,
)

UNKNOWN_AUTHOR = "Unknown User"


@dataclass(frozen=True)
class AttachmentView:
    """Displayable attachment.

    Images show their thumbnail (falling back to the full image); other
    files show their name and size with an "Open" action.
    """

    name: str
    url: str
    preview_url: str | None
    size_label: str
    is_image: bool


@dataclass(frozen=True)
class MessageView:
    """Displayable message."""

    message_id: str
    author_label: str
    avatar_initial: str
    avatar_url: str | None
    day_label: str
    time_label: str
    is_edited: bool
    is_own_message: bool
    segments: list[Segment]
    attachments: list[AttachmentView] = field(default_factory=list)
    replies: list["MessageView"] = field(default_factory=list)


def build_attachment_view(attachment: AttachmentRecord) -> AttachmentView:
    preview_url = None
    if attachment.is_image:
        preview_url = attachment.thumbnail_url or attachment.url
    return AttachmentView(
        name=attachment.original_name,
        url=attachment.url,
        preview_url=preview_url,
        size_label=format_file_size(attachment.size),
        is_image=attachment.is_image,
    )


def build_message_view(
    message: Message,
    today: date,
    viewer_id: str | None = None,
    replies: list[Message] | None = None,
) -> MessageView:
    """Build the view of a message.

    Args:
        message: Message to display.
        today: Viewer's current date, for "Today"/"Yesterday" labels.
        viewer_id: ID of the viewing user.
        replies: Replies to display under the message.

    Returns:
        MessageView. Malformed annotations degrade to plain text.
    """
    author = message.author
    return MessageView(
        message_id=message.id,
        author_label=author.name or UNKNOWN_AUTHOR,
        avatar_initial=author.initial,
        avatar_url=author.avatar,
        day_label=format_day_label(message.created_at, today),
        time_label=format_time(message.created_at),
        is_edited=message.is_edited,
        is_own_message=viewer_id is not None and viewer_id == author.id,
        segments=render_or_plain(message.body, message.mentions, message.links),
        attachments=[build_attachment_view(a) for a in message.attachments],
        replies=[
            build_message_view(reply, today, viewer_id) for reply in replies or []
        ],
    )


def build_feed_views(
    items: list[FeedItem], today: date, viewer_id: str | None = None
) -> list[MessageView]:
    """Build views for a whole feed."""
    return [
        build_message_view(item.message, today, viewer_id, item.replies)
        for item in items
    ]
