"""Persistence infrastructure."""

from anchor.infrastructure.persistence.database import DatabaseManager
from anchor.infrastructure.persistence.directory import (
    SQLiteCollaboratorDirectory,
    SQLiteLinkableEntityDirectory,
)
from anchor.infrastructure.persistence.exceptions import (
    CorruptRecordError,
    PersistenceError,
)
from anchor.infrastructure.persistence.message_repository import (
    SQLiteMessageRepository,
)
from anchor.infrastructure.persistence.message_sender import (
    DBMessageSender,
    UnconfiguredMessageSender,
)
from anchor.infrastructure.persistence.models import (
    CollaboratorModel,
    LinkableEntityModel,
    MessageModel,
    UserModel,
)
from anchor.infrastructure.persistence.user_repository import SQLiteUserRepository

__all__ = [
    "CollaboratorModel",
    "CorruptRecordError",
    "DBMessageSender",
    "DatabaseManager",
    "LinkableEntityModel",
    "MessageModel",
    "PersistenceError",
    "SQLiteCollaboratorDirectory",
    "SQLiteLinkableEntityDirectory",
    "SQLiteMessageRepository",
    "SQLiteUserRepository",
    "UnconfiguredMessageSender",
    "UserModel",
]
