"""User entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """User entity.

    Attributes:
        id: User ID.
        name: Display name, rendered as ``@name`` when mentioned.
        email: Email address shown in the mention picker.
        avatar: Avatar image URL.
    """

    id: str
    name: str
    email: str = ""
    avatar: str | None = None

    @property
    def initial(self) -> str:
        """Avatar placeholder letter."""
        return self.name[:1].upper() or "U"
