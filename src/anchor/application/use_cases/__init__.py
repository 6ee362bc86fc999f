"""Application use cases."""

from anchor.application.use_cases.compose_message import MessageComposer
from anchor.application.use_cases.message_feed import MessageFeedUseCase

__all__ = ["MessageComposer", "MessageFeedUseCase"]
