"""Linkable entity."""

from dataclasses import dataclass

PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class LinkableEntity:
    """Entity offered in the link picker.

    Entries and reminders carry a ``title``; medications, contacts and
    medical data records carry a ``name``.

    Attributes:
        id: Entity ID.
        title: Title, if the entity has one.
        name: Name, if the entity has one.
        content: Body text shown as a preview.
        description: Free-form description.
    """

    id: str
    title: str | None = None
    name: str | None = None
    content: str | None = None
    description: str | None = None

    @property
    def label(self) -> str:
        return self.title or self.name or ""

    @property
    def preview(self) -> str | None:
        if not self.content:
            return None
        if len(self.content) > PREVIEW_LENGTH:
            return self.content[:PREVIEW_LENGTH] + "..."
        return self.content
