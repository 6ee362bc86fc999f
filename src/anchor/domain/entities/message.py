"""Message entities."""

from dataclasses import dataclass, field
from datetime import datetime

from anchor.domain.entities.attachment import AttachmentRecord
from anchor.domain.entities.span import EntityLink, Mention
from anchor.domain.entities.user import User


@dataclass(frozen=True)
class Message:
    """Sent message in a child's activity feed.

    Attributes:
        id: Message ID.
        child_id: Child whose feed the message belongs to.
        author: User who wrote the message.
        body: Message text.
        created_at: When the message was sent.
        edited_at: When the message was last edited.
        reply_to_id: Parent message ID (if a reply).
        attachments: Attached files.
        mentions: Mention spans over the body.
        links: Entity link spans over the body.
        deleted_at: When the message was soft-deleted.
    """

    id: str
    child_id: str
    author: User
    body: str
    created_at: datetime
    edited_at: datetime | None = None
    reply_to_id: str | None = None
    attachments: list[AttachmentRecord] = field(default_factory=list)
    mentions: list[Mention] = field(default_factory=list)
    links: list[EntityLink] = field(default_factory=list)
    deleted_at: datetime | None = None

    @property
    def is_edited(self) -> bool:
        return self.edited_at is not None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_reply(self) -> bool:
        """Check if this message replies to another message."""
        return self.reply_to_id is not None

    def mentions_user(self, user_id: str) -> bool:
        """Check if a user is mentioned in this message.

        Args:
            user_id: The user ID to check.

        Returns:
            True if the user is mentioned.
        """
        return any(mention.user_id == user_id for mention in self.mentions)


@dataclass(frozen=True)
class OutgoingMessage:
    """Finalized draft handed to the send collaborator.

    Attributes:
        child_id: Target child feed.
        author_id: Sending user ID.
        body: Trimmed message text.
        mentions: Mention spans over ``body``.
        links: Entity link spans over ``body``.
        attachments: Attachment records.
        reply_to_id: Parent message ID when replying.
        edit_of: ID of the message being replaced when editing.
    """

    child_id: str
    author_id: str
    body: str
    mentions: list[Mention] = field(default_factory=list)
    links: list[EntityLink] = field(default_factory=list)
    attachments: list[AttachmentRecord] = field(default_factory=list)
    reply_to_id: str | None = None
    edit_of: str | None = None


@dataclass(frozen=True)
class SendReceipt:
    """Successful send result."""

    message_id: str


@dataclass(frozen=True)
class Unavailable:
    """Backend cannot serve the request yet.

    Returned instead of raising when a backend is not configured, which is
    an expected state rather than a failure.
    """

    reason: str


@dataclass(frozen=True)
class FeedItem:
    """Top-level message with its replies (oldest reply first)."""

    message: Message
    replies: list[Message] = field(default_factory=list)
