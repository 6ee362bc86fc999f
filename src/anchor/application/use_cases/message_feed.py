"""Message feed use case."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from anchor.domain.entities import FeedItem, Message
from anchor.domain.exceptions import MessageNotFoundError, MessagePermissionError
from anchor.domain.repositories import MessageRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageFeedUseCase:
    """Use case for reading and deleting messages in a child's feed."""

    def __init__(
        self,
        message_repository: MessageRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the use case.

        Args:
            message_repository: Repository for stored messages.
            clock: Returns the current time (UTC).
        """
        self._message_repository = message_repository
        self._clock = clock

    async def list_messages(self, child_id: str, limit: int = 50) -> list[FeedItem]:
        """List a child's feed.

        Args:
            child_id: Child ID.
            limit: Maximum number of top-level messages.

        Returns:
            Top-level messages (newest first), each with its replies
            (oldest first). Deleted messages are excluded.
        """
        messages = await self._message_repository.find_by_child(child_id, limit=limit)
        if not messages:
            return []

        replies = await self._message_repository.find_replies(
            [message.id for message in messages]
        )
        replies_by_parent: dict[str, list[Message]] = {}
        for reply in replies:
            if reply.reply_to_id is not None:
                replies_by_parent.setdefault(reply.reply_to_id, []).append(reply)

        return [
            FeedItem(message=message, replies=replies_by_parent.get(message.id, []))
            for message in messages
        ]

    async def delete_message(self, message_id: str, requested_by: str) -> None:
        """Soft-delete a message.

        Args:
            message_id: Message to delete.
            requested_by: ID of the user asking for the deletion.

        Raises:
            MessageNotFoundError: The message does not exist or is already
                deleted.
            MessagePermissionError: The user is not the message's author.
        """
        message = await self._message_repository.find_by_id(message_id)
        if message is None or message.is_deleted:
            raise MessageNotFoundError(message_id)
        if message.author.id != requested_by:
            raise MessagePermissionError(
                f"User {requested_by} cannot delete message {message_id}"
            )

        await self._message_repository.soft_delete(message_id, self._clock())
        logger.info("Message deleted: %s", message_id)
