"""Split annotated message text into display segments."""

import logging
from collections.abc import Iterable, Iterator, Sequence

from anchor.domain.entities import EntityLink, Mention, Segment, SegmentKind, Span
from anchor.domain.entities.span import SpanKind
from anchor.domain.exceptions import MalformedSpanSetError

logger = logging.getLogger(__name__)

_SEGMENT_KINDS = {
    SpanKind.MENTION: SegmentKind.MENTION,
    SpanKind.LINK: SegmentKind.LINK,
}


class RenderedText:
    """Validated, restartable sequence of display segments.

    Spans are checked when the object is built, so iteration never yields
    partial output for a malformed span set. Each iteration walks the body
    again from the start; nothing is cached or mutated.
    """

    def __init__(
        self,
        body: str,
        mentions: Sequence[Mention],
        links: Sequence[EntityLink],
    ) -> None:
        """Initialize and validate.

        Args:
            body: Message text.
            mentions: Mention spans.
            links: Entity link spans.

        Raises:
            MalformedSpanSetError: A span lies outside the body or two spans
                overlap.
        """
        self._body = body
        self._spans = _sorted_spans(mentions, links)
        _validate(body, self._spans)

    @property
    def body(self) -> str:
        return self._body

    def __iter__(self) -> Iterator[Segment]:
        cursor = 0
        for span in self._spans:
            if span.start_index == span.end_index:
                continue
            if cursor < span.start_index:
                yield Segment(SegmentKind.PLAIN, self._body[cursor : span.start_index])
            yield Segment(
                _SEGMENT_KINDS[span.kind],
                self._body[span.start_index : span.end_index],
                span,
            )
            cursor = span.end_index

        if cursor < len(self._body):
            yield Segment(SegmentKind.PLAIN, self._body[cursor:])


def _sorted_spans(
    mentions: Iterable[Mention], links: Iterable[EntityLink]
) -> tuple[Span, ...]:
    # Coincident starts: shorter span first.
    merged: list[Span] = [*mentions, *links]
    return tuple(sorted(merged, key=lambda s: (s.start_index, s.end_index)))


def _validate(body: str, spans: Sequence[Span]) -> None:
    previous_end = 0
    for span in spans:
        if span.start_index < 0 or span.start_index > span.end_index:
            raise MalformedSpanSetError(
                f"{span.kind.value} span has invalid range "
                f"[{span.start_index}, {span.end_index})"
            )
        if span.end_index > len(body):
            raise MalformedSpanSetError(
                f"{span.kind.value} span [{span.start_index}, {span.end_index}) "
                f"exceeds body length {len(body)}"
            )
        if span.start_index < previous_end:
            raise MalformedSpanSetError(
                f"{span.kind.value} span [{span.start_index}, {span.end_index}) "
                f"overlaps a previous span ending at {previous_end}"
            )
        previous_end = max(previous_end, span.end_index)


def render_segments(
    body: str,
    mentions: Sequence[Mention] = (),
    links: Sequence[EntityLink] = (),
) -> RenderedText:
    """Render annotated text into segments.

    Args:
        body: Message text.
        mentions: Mention spans.
        links: Entity link spans.

    Returns:
        Segments in reading order. Concatenating their text gives ``body``.

    Raises:
        MalformedSpanSetError: Spans cannot be rendered against ``body``.
    """
    return RenderedText(body, mentions, links)


def render_or_plain(
    body: str,
    mentions: Sequence[Mention] = (),
    links: Sequence[EntityLink] = (),
) -> list[Segment]:
    """Render annotated text, falling back to plain text on malformed spans.

    Args:
        body: Message text.
        mentions: Mention spans.
        links: Entity link spans.

    Returns:
        Segments in reading order. On a malformed span set, a single plain
        segment covering the whole body (annotations dropped).
    """
    try:
        return list(render_segments(body, mentions, links))
    except MalformedSpanSetError as e:
        logger.warning("Dropping annotations for malformed span set: %s", e)
        if not body:
            return []
        return [Segment(SegmentKind.PLAIN, body)]
