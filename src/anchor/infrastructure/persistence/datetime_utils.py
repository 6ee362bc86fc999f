"""Datetime utilities for persistence layer."""

from datetime import datetime, timezone


def normalize_to_utc(dt: datetime) -> datetime:
    """SQLite から読み出した日時を UTC の aware datetime にする

    SQLite はタイムゾーン情報を保持しないため、naive な値は UTC とみなす。

    Args:
        dt: 変換対象の日時

    Returns:
        UTC の timezone-aware datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_optional_to_utc(dt: datetime | None) -> datetime | None:
    """None を許容する normalize_to_utc"""
    if dt is None:
        return None
    return normalize_to_utc(dt)
