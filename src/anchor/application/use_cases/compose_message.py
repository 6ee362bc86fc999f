"""Compose message use case."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import TypeVar, cast

from anchor.domain.entities import (
    Attachment,
    AttachmentRecord,
    DraftState,
    EntityLink,
    EntityType,
    LinkableEntity,
    LinkTarget,
    Mention,
    Message,
    OutgoingMessage,
    SendReceipt,
    Span,
    SpanKind,
    Unavailable,
    User,
    create_span,
    shift_span,
)
from anchor.domain.exceptions import (
    DraftFrozenError,
    EmptyMessageError,
    InvalidCursorError,
    SendFailedError,
    UnsupportedMediaTypeError,
)
from anchor.domain.services import (
    AttachmentUploader,
    CollaboratorDirectory,
    LinkableEntityDirectory,
    MessageSender,
)

logger = logging.getLogger(__name__)

_SpanT = TypeVar("_SpanT", Mention, EntityLink)


class MessageComposer:
    """Draft state of a message being composed.

    Owns the body text, cursor, mention and link spans, attachments and the
    reply/edit context of one draft, and turns user actions into span
    mutations that keep offsets consistent with the body.

    Offsets are only maintained for changes made through ``insert_mention``,
    ``insert_link`` and ``replace_range``. ``set_body`` replaces the text
    as-is; spans that no longer match their token are detached on the next
    token insertion or at submit.

    Errors raised by ``on_state_change`` are logged and never interrupt a
    state transition.
    """

    def __init__(
        self,
        sender: MessageSender,
        child_id: str,
        author: User,
        collaborator_directory: CollaboratorDirectory | None = None,
        entity_directory: LinkableEntityDirectory | None = None,
        uploader: AttachmentUploader | None = None,
        send_timeout: float | None = None,
        default_link_type: EntityType = EntityType.ENTRY,
        on_state_change: Callable[[DraftState], None] | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            sender: Collaborator that delivers finalized drafts.
            child_id: Child whose feed the message goes to.
            author: Composing user.
            collaborator_directory: Source for the mention picker.
            entity_directory: Source for the link picker.
            uploader: File storage for attachments. Without it, local URIs
                are sent as attachment URLs.
            send_timeout: Default seconds to wait for the sender (None waits
                forever).
            default_link_type: Initially selected link picker type.
            on_state_change: Called with each new draft state.
        """
        self._sender = sender
        self._child_id = child_id
        self._author = author
        self._collaborator_directory = collaborator_directory
        self._entity_directory = entity_directory
        self._uploader = uploader
        self._send_timeout = send_timeout
        self._on_state_change = on_state_change

        self._state = DraftState.EMPTY
        self._body = ""
        self._cursor = 0
        self._mentions: list[Mention] = []
        self._links: list[EntityLink] = []
        self._attachments: list[Attachment] = []
        self._reply_to_id: str | None = None
        self._edit_of: str | None = None

        self.selected_link_type = default_link_type
        self.collaborators: list[User] = []
        self.linkable_entities: list[LinkableEntity] = []

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def body(self) -> str:
        return self._body

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def mentions(self) -> list[Mention]:
        return list(self._mentions)

    @property
    def links(self) -> list[EntityLink]:
        return list(self._links)

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    @property
    def reply_to_id(self) -> str | None:
        return self._reply_to_id

    @property
    def editing_message_id(self) -> str | None:
        return self._edit_of

    @property
    def can_send(self) -> bool:
        """Whether the send button should be enabled."""
        if self._state is DraftState.SENDING:
            return False
        return bool(self._body.strip()) or bool(self._attachments)

    # Text and cursor

    def set_body(self, text: str) -> None:
        """Replace the body text without touching span offsets.

        Args:
            text: New body text.

        Raises:
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        self._body = text
        self._cursor = min(self._cursor, len(text))
        self._touch()

    def set_cursor(self, position: int) -> None:
        """Track the selection start reported by the text input.

        Raises:
            InvalidCursorError: Position is outside ``[0, len(body)]``.
        """
        self._check_position(position)
        self._cursor = position

    def replace_range(self, start: int, end: int, text: str) -> None:
        """Replace ``body[start:end]`` with ``text``, maintaining spans.

        Spans entirely before the edit keep their offsets, spans entirely
        after it are shifted, and spans the edit touches are dropped.

        Args:
            start: Start offset of the replaced range.
            end: End offset of the replaced range.
            text: Replacement text.

        Raises:
            InvalidCursorError: Range is outside the body or reversed.
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        self._check_position(start)
        self._check_position(end)
        if end < start:
            raise InvalidCursorError(
                start, len(self._body), f"Edit range [{start}, {end}) is reversed"
            )

        removed = end - start

        def adjust(span: Span) -> Span | None:
            adjusted: Span | None = span
            if removed:
                adjusted = shift_span(span, start, -removed)
            if adjusted is not None and text:
                adjusted = shift_span(adjusted, start, len(text))
            return adjusted

        self._mentions = self._adjust_spans(self._mentions, adjust)
        self._links = self._adjust_spans(self._links, adjust)
        self._body = self._body[:start] + text + self._body[end:]
        self._cursor = start + len(text)
        self._touch()

    # Span insertion

    def insert_mention(self, user: User, at_index: int | None = None) -> Mention:
        """Insert an ``@name`` token and track it as a mention.

        Args:
            user: Mentioned user.
            at_index: Insertion offset. Defaults to the cursor.

        Returns:
            The new mention span.

        Raises:
            InvalidCursorError: Offset is outside the body or inside an
                existing token.
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        token = f"@{user.name}"
        start = self._insert_token(token, at_index)
        mention = create_span(
            SpanKind.MENTION, user, start, start + len(token), len(self._body)
        )
        assert isinstance(mention, Mention)
        self._mentions.append(mention)
        self._touch()
        return mention

    def insert_link(
        self,
        entity: LinkableEntity,
        at_index: int | None = None,
        entity_type: EntityType | None = None,
    ) -> EntityLink:
        """Insert a ``[label]`` token and track it as an entity link.

        Args:
            entity: Linked entity.
            at_index: Insertion offset. Defaults to the cursor.
            entity_type: Entity type. Defaults to the selected link type.

        Returns:
            The new link span.

        Raises:
            ValueError: The entity has neither title nor name.
            InvalidCursorError: Offset is outside the body or inside an
                existing token.
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        if not entity.label:
            raise ValueError(f"Entity {entity.id} has no title or name")

        token = f"[{entity.label}]"
        start = self._insert_token(token, at_index)
        target = LinkTarget(
            entity_type=entity_type or self.selected_link_type,
            entity_id=entity.id,
            link_text=token,
        )
        link = create_span(
            SpanKind.LINK, target, start, start + len(token), len(self._body)
        )
        assert isinstance(link, EntityLink)
        self._links.append(link)
        self._touch()
        return link

    # Attachments

    def add_attachment(self, attachment: Attachment) -> None:
        """Add an attachment to the draft.

        Raises:
            UnsupportedMediaTypeError: The attachment has no MIME type.
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        if not attachment.mime_type:
            raise UnsupportedMediaTypeError(
                f"Attachment {attachment.id} has no MIME type"
            )
        self._attachments.append(attachment)
        self._touch()

    def remove_attachment(self, attachment_id: str) -> bool:
        """Remove an attachment from the draft.

        Returns:
            True if an attachment was removed.

        Raises:
            DraftFrozenError: A send is in flight.
        """
        self._ensure_mutable()
        remaining = [a for a in self._attachments if a.id != attachment_id]
        removed = len(remaining) != len(self._attachments)
        self._attachments = remaining
        if removed:
            self._touch()
        return removed

    # Reply/edit context

    def open_reply(self, message_id: str) -> None:
        """Compose a reply to a message.

        Leaves edit mode; the edited message's text is discarded.
        """
        self._ensure_mutable()
        if self._edit_of is not None:
            self._reset_draft()
            self._transition(DraftState.EMPTY)
        self._reply_to_id = message_id

    def open_edit(self, message: Message) -> None:
        """Edit a sent message.

        Pre-fills the draft with the message's body and spans. Leaves reply
        mode.
        """
        self._ensure_mutable()
        self._reset_draft()
        self._body = message.body
        self._cursor = len(message.body)
        # Names may have changed since sending; the body is authoritative.
        self._mentions = [
            replace(m, display_name=message.body[m.start_index + 1 : m.end_index])
            for m in message.mentions
        ]
        self._links = list(message.links)
        self._edit_of = message.id
        self._transition(DraftState.EMPTY)

    def cancel(self) -> None:
        """Discard the draft and any reply/edit context."""
        self._ensure_mutable()
        self._reset_draft()
        self._transition(DraftState.EMPTY)

    # Pickers

    def select_link_type(self, entity_type: EntityType) -> None:
        self.selected_link_type = entity_type

    async def load_collaborators(self) -> list[User]:
        """Load users for the mention picker.

        Returns:
            Collaborators, or an empty list if loading fails.
        """
        if self._collaborator_directory is None:
            return []
        try:
            users = await self._collaborator_directory.list_collaborators(
                self._child_id
            )
        except Exception as e:
            logger.warning("Failed to load collaborators: %s", e)
            users = []
        self.collaborators = list(users)
        return list(users)

    async def load_linkable_entities(
        self, entity_type: EntityType | None = None
    ) -> list[LinkableEntity]:
        """Load entities for the link picker.

        Args:
            entity_type: Type to load. Selects it if given; otherwise the
                currently selected type is used.

        Returns:
            Linkable entities, or an empty list if loading fails.
        """
        if entity_type is not None:
            self.select_link_type(entity_type)
        if self._entity_directory is None:
            return []
        try:
            entities = await self._entity_directory.list_linkable_entities(
                self.selected_link_type, self._child_id
            )
        except Exception as e:
            logger.warning(
                "Failed to load linkable %s entities: %s",
                self.selected_link_type.value,
                e,
            )
            entities = []
        self.linkable_entities = list(entities)
        return list(entities)

    # Submit

    async def submit(self, timeout: float | None = None) -> SendReceipt:
        """Send the draft.

        Processing flow:
        1. Reject an empty draft
        2. Detach spans that drifted from their tokens and trim the body
        3. Upload attachments
        4. Call the sender (bounded by the timeout)
        5. Reset the draft on success, keep it on failure

        Args:
            timeout: Seconds to wait for the sender. Defaults to the
                composer's send timeout.

        Returns:
            Receipt of the sent message.

        Raises:
            EmptyMessageError: Body is blank and there are no attachments.
            DraftFrozenError: A send is already in flight.
            SendFailedError: Upload or send failed, timed out, or the backend
                is unavailable. The draft is preserved.
        """
        if self._state is DraftState.SENDING:
            raise DraftFrozenError("A send is already in flight")
        # A retry re-enters EDITING before the next attempt.
        self._touch()
        if not self._body.strip() and not self._attachments:
            raise EmptyMessageError()

        self._detach_drifted_spans()
        body, mentions, links = self._trimmed()

        self._transition(DraftState.SENDING)
        effective_timeout = timeout if timeout is not None else self._send_timeout
        try:
            result = await asyncio.wait_for(
                self._deliver(body, mentions, links), timeout=effective_timeout
            )
        except asyncio.CancelledError:
            self._transition(DraftState.FAILED)
            raise
        except asyncio.TimeoutError as e:
            logger.warning("Message send timed out after %ss", effective_timeout)
            self._transition(DraftState.FAILED)
            raise SendFailedError("Failed to send message: timed out") from e
        except Exception as e:
            logger.exception("Error sending message")
            self._transition(DraftState.FAILED)
            raise SendFailedError(f"Failed to send message: {e}") from e

        if isinstance(result, Unavailable):
            logger.warning("Message backend unavailable: %s", result.reason)
            self._transition(DraftState.FAILED)
            raise SendFailedError(f"Failed to send message: {result.reason}")

        logger.info("Message sent: %s", result.message_id)
        self._transition(DraftState.SENT)
        self._reset_draft()
        self._transition(DraftState.EMPTY)
        return result

    async def _deliver(
        self, body: str, mentions: list[Mention], links: list[EntityLink]
    ) -> SendReceipt | Unavailable:
        records = [await self._to_record(a) for a in self._attachments]
        draft = OutgoingMessage(
            child_id=self._child_id,
            author_id=self._author.id,
            body=body,
            mentions=mentions,
            links=links,
            attachments=records,
            reply_to_id=self._reply_to_id,
            edit_of=self._edit_of,
        )
        return await self._sender.send_message(draft)

    async def _to_record(self, attachment: Attachment) -> AttachmentRecord:
        if self._uploader is None:
            return AttachmentRecord.from_local(attachment)
        uploaded = await self._uploader.upload(attachment.uri)
        return AttachmentRecord.from_upload(attachment, uploaded)

    # Internal helpers

    def _ensure_mutable(self) -> None:
        if not self._state.is_mutable:
            raise DraftFrozenError(
                f"Draft cannot be changed while {self._state.value}"
            )

    def _touch(self) -> None:
        if self._state in (DraftState.EMPTY, DraftState.FAILED):
            self._transition(DraftState.EDITING)

    def _transition(self, state: DraftState) -> None:
        if state is self._state:
            return
        logger.debug("Draft state: %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(state)
        except Exception:
            logger.exception("State change listener failed on %s", state.value)

    def _check_position(self, position: int) -> None:
        if not 0 <= position <= len(self._body):
            raise InvalidCursorError(position, len(self._body))

    def _insert_token(self, token: str, at_index: int | None) -> int:
        position = self._cursor if at_index is None else at_index
        self._check_position(position)
        # Spans left behind by set_body no longer guard their old range.
        self._detach_drifted_spans()
        for span in [*self._mentions, *self._links]:
            if span.start_index < position < span.end_index:
                raise InvalidCursorError(
                    position,
                    len(self._body),
                    f"Cursor {position} is inside an existing "
                    f"{span.kind.value} [{span.start_index}, {span.end_index})",
                )

        def shift(span: Span) -> Span | None:
            return shift_span(span, position, len(token))

        self._mentions = self._adjust_spans(self._mentions, shift)
        self._links = self._adjust_spans(self._links, shift)
        self._body = self._body[:position] + token + self._body[position:]
        self._cursor = position + len(token)
        return position

    def _adjust_spans(
        self, spans: list[_SpanT], adjust: Callable[[Span], Span | None]
    ) -> list[_SpanT]:
        kept: list[_SpanT] = []
        for span in spans:
            adjusted = adjust(span)
            if adjusted is None:
                logger.warning(
                    "Dropping %s [%d, %d) touched by edit",
                    span.kind.value,
                    span.start_index,
                    span.end_index,
                )
                continue
            kept.append(cast(_SpanT, adjusted))
        return kept

    def _detach_drifted_spans(self) -> None:
        def matches(span: Span) -> bool:
            if span.end_index > len(self._body):
                return False
            token = span.token
            if token is None:
                return True
            return self._body[span.start_index : span.end_index] == token

        for spans in (self._mentions, self._links):
            for span in [s for s in spans if not matches(s)]:
                logger.warning(
                    "Detaching %s [%d, %d) that no longer matches its text",
                    span.kind.value,
                    span.start_index,
                    span.end_index,
                )
                spans.remove(span)

    def _trimmed(self) -> tuple[str, list[Mention], list[EntityLink]]:
        stripped = self._body.lstrip()
        lead = len(self._body) - len(stripped)
        body = stripped.rstrip()

        def fits(span: Span) -> bool:
            if span.start_index - lead >= 0 and span.end_index - lead <= len(body):
                return True
            logger.warning(
                "Dropping %s [%d, %d) outside trimmed body",
                span.kind.value,
                span.start_index,
                span.end_index,
            )
            return False

        mentions = [m.shifted(-lead) for m in self._mentions if fits(m)]
        links = [link.shifted(-lead) for link in self._links if fits(link)]
        return body, mentions, links

    def _reset_draft(self) -> None:
        self._body = ""
        self._cursor = 0
        self._mentions = []
        self._links = []
        self._attachments = []
        self._reply_to_id = None
        self._edit_of = None
