"""Domain exceptions."""


class MessagingError(Exception):
    """Base exception for message composition and rendering errors."""


class InvalidSpanRangeError(MessagingError):
    """Span offsets do not fit the body they annotate."""

    def __init__(
        self, start_index: int, end_index: int, body_length: int | None
    ) -> None:
        """Initialize the error.

        Args:
            start_index: Requested start offset.
            end_index: Requested end offset.
            body_length: Length of the annotated body, if known.
        """
        self.start_index = start_index
        self.end_index = end_index
        self.body_length = body_length
        message = f"Invalid span range [{start_index}, {end_index})"
        if body_length is not None:
            message += f" for body of length {body_length}"
        super().__init__(message)


class InvalidCursorError(MessagingError):
    """Cursor position cannot be used for an insertion."""

    def __init__(self, position: int, body_length: int, message: str = "") -> None:
        self.position = position
        self.body_length = body_length
        super().__init__(
            message
            or f"Cursor {position} is outside the body (length {body_length})"
        )


class UnsupportedMediaTypeError(MessagingError):
    """Attachment has no usable MIME type."""


class EmptyMessageError(MessagingError):
    """Message has neither text nor attachments."""

    def __init__(self) -> None:
        super().__init__("Please enter a message or attach an image")


class MalformedSpanSetError(MessagingError):
    """Span collection cannot be rendered against its body.

    Raised when a span runs past the end of the body or two spans overlap.
    This always points at an earlier bug in span maintenance.
    """


class SendFailedError(MessagingError):
    """The send collaborator rejected, timed out, or is unavailable."""


class DraftFrozenError(MessagingError):
    """Draft mutation attempted while a send is in flight."""


class MessageNotFoundError(MessagingError):
    """Referenced message does not exist."""

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__(f"Message {message_id} not found")


class MessagePermissionError(MessagingError):
    """User is not allowed to act on the message."""
