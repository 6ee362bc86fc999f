"""Domain services."""

from anchor.domain.services.link_routes import route_for_link
from anchor.domain.services.protocols import (
    AttachmentUploader,
    CollaboratorDirectory,
    LinkableEntityDirectory,
    MessageSender,
)
from anchor.domain.services.segment_renderer import (
    RenderedText,
    render_or_plain,
    render_segments,
)

__all__ = [
    "AttachmentUploader",
    "CollaboratorDirectory",
    "LinkableEntityDirectory",
    "MessageSender",
    "RenderedText",
    "render_or_plain",
    "render_segments",
    "route_for_link",
]
