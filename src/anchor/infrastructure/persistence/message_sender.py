"""MessageSender implementations."""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from anchor.domain.entities import (
    Message,
    OutgoingMessage,
    SendReceipt,
    Unavailable,
    User,
)
from anchor.domain.exceptions import MessageNotFoundError, MessagePermissionError
from anchor.domain.repositories import MessageRepository
from anchor.domain.services import render_segments

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DBMessageSender:
    """Send messages by writing them to the message repository."""

    def __init__(
        self,
        message_repository: MessageRepository,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        """Initialize the sender.

        Args:
            message_repository: Repository the messages are stored in.
            clock: Returns the current time (UTC).
            id_factory: Generates IDs for new messages.
        """
        self._message_repository = message_repository
        self._clock = clock
        self._id_factory = id_factory

    async def send_message(self, draft: OutgoingMessage) -> SendReceipt:
        """Store a new message, or replace an edited one.

        Args:
            draft: Finalized draft.

        Returns:
            Receipt with the stored message ID.

        Raises:
            MalformedSpanSetError: The draft's spans do not fit its body.
            MessageNotFoundError: The edited message does not exist.
            MessagePermissionError: The edited message has another author.
        """
        # Refuse to persist spans that could not be rendered back.
        render_segments(draft.body, draft.mentions, draft.links)

        if draft.edit_of is not None:
            return await self._replace(draft, draft.edit_of)

        message = Message(
            id=self._id_factory(),
            child_id=draft.child_id,
            author=User(id=draft.author_id, name=""),
            body=draft.body,
            created_at=self._clock(),
            reply_to_id=draft.reply_to_id,
            attachments=list(draft.attachments),
            mentions=list(draft.mentions),
            links=list(draft.links),
        )
        await self._message_repository.save(message)
        logger.debug("Stored message %s for child %s", message.id, message.child_id)
        return SendReceipt(message_id=message.id)

    async def _replace(self, draft: OutgoingMessage, message_id: str) -> SendReceipt:
        existing = await self._message_repository.find_by_id(message_id)
        if existing is None or existing.is_deleted:
            raise MessageNotFoundError(message_id)
        if existing.author.id != draft.author_id:
            raise MessagePermissionError(
                f"User {draft.author_id} cannot edit message {message_id}"
            )

        edited = replace(
            existing,
            body=draft.body,
            mentions=list(draft.mentions),
            links=list(draft.links),
            attachments=[*existing.attachments, *draft.attachments],
            edited_at=self._clock(),
        )
        await self._message_repository.save(edited)
        logger.debug("Edited message %s", message_id)
        return SendReceipt(message_id=message_id)


class UnconfiguredMessageSender:
    """Sender for a backend that has not been set up yet."""

    def __init__(self, backend_name: str = "message backend") -> None:
        self._backend_name = backend_name

    async def send_message(self, draft: OutgoingMessage) -> Unavailable:
        return Unavailable(reason=f"{self._backend_name} is not configured yet")
