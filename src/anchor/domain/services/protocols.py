"""Domain service protocols."""

from typing import Protocol

from anchor.domain.entities import (
    EntityType,
    LinkableEntity,
    OutgoingMessage,
    SendReceipt,
    Unavailable,
    UploadedAttachment,
    User,
)


class MessageSender(Protocol):
    """Message delivery abstraction (backend-independent).

    Implementations persist a finalized draft, either as a new message or,
    when ``edit_of`` is set, as a wholesale replacement of an existing one.
    """

    async def send_message(self, draft: OutgoingMessage) -> SendReceipt | Unavailable:
        """Send a message.

        Args:
            draft: Finalized draft.

        Returns:
            Receipt with the stored message ID, or ``Unavailable`` when the
            backend is not configured.

        Raises:
            Exception: Any backend failure. Callers treat it as a failed send.
        """
        ...


class CollaboratorDirectory(Protocol):
    """Source of users that can be mentioned in a child's feed."""

    async def list_collaborators(self, child_id: str) -> list[User]:
        """List collaborators of a child.

        Args:
            child_id: Child ID.

        Returns:
            Users who collaborate on the child's care.
        """
        ...


class LinkableEntityDirectory(Protocol):
    """Source of entities that can be linked from a message."""

    async def list_linkable_entities(
        self,
        entity_type: EntityType,
        child_id: str,
    ) -> list[LinkableEntity]:
        """List entities of one type belonging to a child.

        Args:
            entity_type: Entity type to list.
            child_id: Child ID.

        Returns:
            Linkable entities.
        """
        ...


class AttachmentUploader(Protocol):
    """File storage abstraction."""

    async def upload(self, local_uri: str) -> UploadedAttachment:
        """Upload a local file.

        Args:
            local_uri: URI of the local file.

        Returns:
            Uploaded file information.
        """
        ...
