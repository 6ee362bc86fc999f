"""Domain repositories."""

from anchor.domain.repositories.message_repository import MessageRepository
from anchor.domain.repositories.user_repository import UserRepository

__all__ = [
    "MessageRepository",
    "UserRepository",
]
