"""Display segment entity."""

from dataclasses import dataclass
from enum import Enum

from anchor.domain.entities.span import Span


class SegmentKind(Enum):
    """Display segment kinds."""

    PLAIN = "plain"
    MENTION = "mention"
    LINK = "link"


@dataclass(frozen=True)
class Segment:
    """Piece of message text ready for display.

    Attributes:
        kind: Segment kind.
        text: Exact body text covered by the segment.
        span: Span the segment was produced from (None for plain text).
    """

    kind: SegmentKind
    text: str
    span: Span | None = None
