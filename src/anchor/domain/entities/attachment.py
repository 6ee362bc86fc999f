"""Attachment entities."""

from dataclasses import dataclass

from anchor.domain.exceptions import UnsupportedMediaTypeError


@dataclass(frozen=True)
class Attachment:
    """Attachment picked into a draft (not yet uploaded).

    Attributes:
        id: Draft-local attachment ID.
        uri: Local file URI.
        mime_type: MIME type, e.g. ``image/jpeg``.
        display_name: File name shown to the user.
        byte_size: File size in bytes.
    """

    id: str
    uri: str
    mime_type: str | None
    display_name: str
    byte_size: int = 0

    @property
    def is_image(self) -> bool:
        return bool(self.mime_type) and self.mime_type.startswith("image/")


@dataclass(frozen=True)
class UploadedAttachment:
    """Result of uploading an attachment to file storage."""

    url: str
    byte_size: int
    mime_type: str
    thumbnail_url: str | None = None


@dataclass(frozen=True)
class AttachmentRecord:
    """Attachment as persisted with a sent message.

    Attributes:
        file_name: Stored file name.
        original_name: Name of the file the user picked.
        mime_type: MIME type.
        size: Size in bytes.
        url: Download URL.
        thumbnail_url: Thumbnail URL (images only).
    """

    file_name: str
    original_name: str
    mime_type: str
    size: int
    url: str
    thumbnail_url: str | None = None

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @classmethod
    def from_local(cls, attachment: Attachment) -> "AttachmentRecord":
        """Build a record that points at the local file.

        Raises:
            UnsupportedMediaTypeError: The attachment has no MIME type.
        """
        if not attachment.mime_type:
            raise UnsupportedMediaTypeError(
                f"Attachment {attachment.id} has no MIME type"
            )
        return cls(
            file_name=attachment.display_name,
            original_name=attachment.display_name,
            mime_type=attachment.mime_type,
            size=attachment.byte_size,
            url=attachment.uri,
            thumbnail_url=attachment.uri if attachment.is_image else None,
        )

    @classmethod
    def from_upload(
        cls, attachment: Attachment, uploaded: UploadedAttachment
    ) -> "AttachmentRecord":
        """Build a record from an uploaded file."""
        return cls(
            file_name=uploaded.url.rsplit("/", 1)[-1] or attachment.display_name,
            original_name=attachment.display_name,
            mime_type=uploaded.mime_type,
            size=uploaded.byte_size,
            url=uploaded.url,
            thumbnail_url=uploaded.thumbnail_url,
        )
