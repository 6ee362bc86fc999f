"""Presentation layer."""

from anchor.presentation.message_view import (
    AttachmentView,
    MessageView,
    build_feed_views,
    build_message_view,
)

__all__ = [
    "AttachmentView",
    "MessageView",
    "build_feed_views",
    "build_message_view",
]
