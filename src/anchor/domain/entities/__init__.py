"""Domain entities."""

from anchor.domain.entities.attachment import (
    Attachment,
    AttachmentRecord,
    UploadedAttachment,
)
from anchor.domain.entities.draft import DraftState
from anchor.domain.entities.linkable_entity import LinkableEntity
from anchor.domain.entities.message import (
    FeedItem,
    Message,
    OutgoingMessage,
    SendReceipt,
    Unavailable,
)
from anchor.domain.entities.segment import Segment, SegmentKind
from anchor.domain.entities.span import (
    EntityLink,
    EntityType,
    LinkTarget,
    Mention,
    Span,
    SpanKind,
    create_span,
    shift_span,
    spans_overlap,
)
from anchor.domain.entities.user import User

__all__ = [
    "Attachment",
    "AttachmentRecord",
    "DraftState",
    "EntityLink",
    "EntityType",
    "FeedItem",
    "LinkTarget",
    "LinkableEntity",
    "Mention",
    "Message",
    "OutgoingMessage",
    "Segment",
    "SegmentKind",
    "SendReceipt",
    "Span",
    "SpanKind",
    "Unavailable",
    "UploadedAttachment",
    "User",
    "create_span",
    "shift_span",
    "spans_overlap",
]
