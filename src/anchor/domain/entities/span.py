"""Annotation spans over message text.

Spans address a half-open character range ``[start_index, end_index)`` of a
message body. Two kinds exist: mentions of a user and links to a domain
entity. Spans never own the text they cover; the body is the source of
truth and offsets must be kept in step with it while a draft is edited.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, TypeAlias

from anchor.domain.entities.user import User
from anchor.domain.exceptions import InvalidSpanRangeError


class SpanKind(Enum):
    """Span kinds."""

    MENTION = "mention"
    LINK = "link"


class EntityType(Enum):
    """Entity types that can be linked from a message."""

    ENTRY = "entry"
    MEDICATION = "medication"
    REMINDER = "reminder"
    CONTACT = "contact"
    MEDICAL_DATA = "medicalData"


@dataclass(frozen=True)
class Mention:
    """Mention of a user.

    Attributes:
        user_id: Mentioned user ID.
        start_index: Start offset (inclusive).
        end_index: End offset (exclusive).
        display_name: Name used to build the ``@name`` token, if known.
    """

    user_id: str
    start_index: int
    end_index: int
    display_name: str = ""

    @property
    def kind(self) -> SpanKind:
        return SpanKind.MENTION

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    @property
    def token(self) -> str | None:
        """Text the mention was created from, or None if the name is unknown."""
        if not self.display_name:
            return None
        return f"@{self.display_name}"

    def shifted(self, delta: int) -> "Mention":
        return replace(
            self,
            start_index=self.start_index + delta,
            end_index=self.end_index + delta,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the persisted shape."""
        return {
            "userId": self.user_id,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any], display_name: str = "") -> "Mention":
        """Parse the persisted shape.

        Args:
            data: ``{"userId", "startIndex", "endIndex"}`` mapping.
            display_name: Mentioned user's name, when the caller knows it.

        Returns:
            Mention span.

        Raises:
            InvalidSpanRangeError: Offsets are negative or reversed.
        """
        start_index, end_index = _parse_offsets(data)
        return cls(
            user_id=str(data["userId"]),
            start_index=start_index,
            end_index=end_index,
            display_name=display_name,
        )


@dataclass(frozen=True)
class LinkTarget:
    """Payload of an entity link.

    Attributes:
        entity_type: Linked entity type.
        entity_id: Linked entity ID.
        link_text: Exact token inserted into the body, e.g. ``[Title]``.
    """

    entity_type: EntityType
    entity_id: str
    link_text: str


@dataclass(frozen=True)
class EntityLink:
    """Link to a domain entity.

    ``link_text`` equals ``body[start_index:end_index]`` when the link is
    created. The two drift apart only if the body is edited without
    maintaining offsets.
    """

    entity_type: EntityType
    entity_id: str
    link_text: str
    start_index: int
    end_index: int

    @property
    def kind(self) -> SpanKind:
        return SpanKind.LINK

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    @property
    def token(self) -> str:
        return self.link_text

    def shifted(self, delta: int) -> "EntityLink":
        return replace(
            self,
            start_index=self.start_index + delta,
            end_index=self.end_index + delta,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the persisted shape."""
        return {
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "linkText": self.link_text,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "EntityLink":
        """Parse the persisted shape.

        Raises:
            InvalidSpanRangeError: Offsets are negative or reversed.
            ValueError: Unknown entity type.
        """
        start_index, end_index = _parse_offsets(data)
        return cls(
            entity_type=EntityType(data["entityType"]),
            entity_id=str(data["entityId"]),
            link_text=str(data["linkText"]),
            start_index=start_index,
            end_index=end_index,
        )


Span: TypeAlias = Mention | EntityLink


def _parse_offsets(data: dict[str, Any]) -> tuple[int, int]:
    start_index = int(data["startIndex"])
    end_index = int(data["endIndex"])
    if start_index < 0 or end_index < start_index:
        raise InvalidSpanRangeError(start_index, end_index, None)
    return start_index, end_index


def create_span(
    kind: SpanKind,
    payload: User | LinkTarget,
    start_index: int,
    end_index: int,
    body_length: int,
) -> Span:
    """Create a span over a body of the given length.

    Args:
        kind: Span kind.
        payload: ``User`` for mentions, ``LinkTarget`` for links.
        start_index: Start offset (inclusive).
        end_index: End offset (exclusive).
        body_length: Length of the body the span annotates.

    Returns:
        Mention or EntityLink.

    Raises:
        InvalidSpanRangeError: ``start_index < 0``, ``end_index > body_length``
            or ``start_index >= end_index``.
        TypeError: Payload does not match the kind.
    """
    if start_index < 0 or end_index > body_length or start_index >= end_index:
        raise InvalidSpanRangeError(start_index, end_index, body_length)

    if kind is SpanKind.MENTION:
        if not isinstance(payload, User):
            raise TypeError("Mention payload must be a User")
        return Mention(
            user_id=payload.id,
            start_index=start_index,
            end_index=end_index,
            display_name=payload.name,
        )

    if not isinstance(payload, LinkTarget):
        raise TypeError("Link payload must be a LinkTarget")
    return EntityLink(
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        link_text=payload.link_text,
        start_index=start_index,
        end_index=end_index,
    )


def spans_overlap(a: Span, b: Span) -> bool:
    """Check whether two spans share at least one character."""
    return a.start_index < b.end_index and b.start_index < a.end_index


def shift_span(span: Span, edit_start_index: int, delta_length: int) -> Span | None:
    """Move a span to account for an edit of the body.

    A positive ``delta_length`` is an insertion at ``edit_start_index``; a
    negative one removes ``-delta_length`` characters starting there.

    Args:
        span: Span to adjust.
        edit_start_index: Offset where the edit starts.
        delta_length: Change in body length.

    Returns:
        The shifted span when the edit lies entirely before it, the same span
        when the edit lies entirely after it, or None when the edit touches
        the span's range (the span is invalidated).
    """
    if delta_length == 0:
        return span

    if delta_length > 0:
        if edit_start_index <= span.start_index:
            return span.shifted(delta_length)
        if edit_start_index >= span.end_index:
            return span
        return None

    removed_end = edit_start_index - delta_length
    if removed_end <= span.start_index:
        return span.shifted(delta_length)
    if edit_start_index >= span.end_index:
        return span
    return None
