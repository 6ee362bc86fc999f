"""Tests for message formatting utilities."""

from datetime import date, datetime, timezone

import pytest

from anchor.domain.entities import (
    EntityLink,
    EntityType,
    Mention,
    Message,
    Segment,
    SegmentKind,
    User,
)
from anchor.domain.services import route_for_link
from anchor.domain.services.message_formatter import (
    format_day_label,
    format_file_size,
    format_message_with_metadata,
    format_segment,
    format_segments,
    format_time,
)


def create_link(entity_type: EntityType, entity_id: str = "e1") -> EntityLink:
    return EntityLink(
        entity_type=entity_type,
        entity_id=entity_id,
        link_text="[Tylenol]",
        start_index=0,
        end_index=9,
    )


class TestFormatDayLabel:
    """format_day_label tests."""

    def test_today(self) -> None:
        dt = datetime(2024, 3, 10, 8, 30, tzinfo=timezone.utc)

        assert format_day_label(dt, date(2024, 3, 10)) == "Today"

    def test_yesterday(self) -> None:
        dt = datetime(2024, 3, 9, 23, 59, tzinfo=timezone.utc)

        assert format_day_label(dt, date(2024, 3, 10)) == "Yesterday"

    def test_older(self) -> None:
        dt = datetime(2024, 3, 1, tzinfo=timezone.utc)

        assert format_day_label(dt, date(2024, 3, 10)) == "2024-03-01"


class TestFormatters:
    """Small formatter tests."""

    def test_format_time(self) -> None:
        assert format_time(datetime(2024, 3, 10, 8, 5)) == "08:05"

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0.0 KB"), (1024, "1.0 KB"), (12595, "12.3 KB")],
    )
    def test_format_file_size(self, size: int, expected: str) -> None:
        assert format_file_size(size) == expected


class TestRouteForLink:
    """route_for_link tests."""

    @pytest.mark.parametrize(
        ("entity_type", "expected"),
        [
            (EntityType.ENTRY, "/entries/e1"),
            (EntityType.MEDICATION, "/medications/e1"),
            (EntityType.REMINDER, "/reminders/e1"),
            (EntityType.CONTACT, "/contacts/e1"),
            (EntityType.MEDICAL_DATA, "/medical-data/e1"),
        ],
    )
    def test_routes(self, entity_type: EntityType, expected: str) -> None:
        assert route_for_link(create_link(entity_type)) == expected


class TestFormatSegment:
    """format_segment tests."""

    def test_plain(self) -> None:
        assert format_segment(Segment(SegmentKind.PLAIN, "hi ")) == "hi "

    def test_mention(self) -> None:
        segment = Segment(
            SegmentKind.MENTION,
            "@Ann",
            Mention(user_id="u1", start_index=0, end_index=4),
        )

        assert format_segment(segment) == "**@Ann**"

    def test_link(self) -> None:
        segment = Segment(
            SegmentKind.LINK, "[Tylenol]", create_link(EntityType.MEDICATION)
        )

        assert format_segment(segment) == "[Tylenol](/medications/e1)"

    def test_format_segments(self) -> None:
        segments = [
            Segment(SegmentKind.PLAIN, "Ask "),
            Segment(
                SegmentKind.MENTION,
                "@Ann",
                Mention(user_id="u1", start_index=4, end_index=8),
            ),
        ]

        assert format_segments(segments) == "Ask **@Ann**"


class TestFormatMessageWithMetadata:
    """format_message_with_metadata tests."""

    def test_basic_formatting(self) -> None:
        message = Message(
            id="m1",
            child_id="c1",
            author=User(id="u1", name="Ann"),
            body="Check [Tylenol]",
            created_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
            links=[
                EntityLink(
                    entity_type=EntityType.MEDICATION,
                    entity_id="e1",
                    link_text="[Tylenol]",
                    start_index=6,
                    end_index=15,
                )
            ],
        )

        result = format_message_with_metadata(message)

        assert result == "[2024-01-01 12:00] Ann: Check [Tylenol](/medications/e1)"

    def test_edited_marker(self) -> None:
        message = Message(
            id="m1",
            child_id="c1",
            author=User(id="u1", name="Ann"),
            body="Hi",
            created_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
            edited_at=datetime(2024, 1, 1, 12, 5, tzinfo=timezone.utc),
        )

        assert format_message_with_metadata(message).endswith("Hi (edited)")
