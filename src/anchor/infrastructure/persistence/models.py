"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class UserModel(SQLModel, table=True):
    """ユーザーテーブル"""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(unique=True, index=True)
    name: str
    email: str = ""
    avatar: str | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CollaboratorModel(SQLModel, table=True):
    """子どもの共同ケア参加者テーブル"""

    __tablename__ = "collaborators"

    id: int | None = Field(default=None, primary_key=True)
    child_id: str = Field(index=True)
    user_id: str = Field(index=True)
    role: str = "family"  # parent / clinician / family
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("child_id", "user_id", name="uq_child_user"),
    )


class LinkableEntityModel(SQLModel, table=True):
    """メッセージからリンク可能なエンティティテーブル"""

    __tablename__ = "linkable_entities"

    id: int | None = Field(default=None, primary_key=True)
    entity_type: str = Field(index=True)  # EntityType の値
    entity_id: str
    child_id: str = Field(index=True)
    title: str | None = None
    name: str | None = None
    content: str | None = None
    description: str | None = None

    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", name="uq_entity_type_id"),
    )


class MessageModel(SQLModel, table=True):
    """メッセージテーブル"""

    __tablename__ = "messages"

    id: int | None = Field(default=None, primary_key=True)
    message_id: str = Field(unique=True, index=True)
    child_id: str = Field(index=True)
    author_id: str
    body: str
    created_at: datetime
    edited_at: datetime | None = None
    reply_to_id: str | None = Field(default=None, index=True)
    # JSON format: [{"userId": "u1", "startIndex": 0, "endIndex": 4}]
    mentions: str = "[]"
    # JSON format: [{"entityType": "medication", "entityId": "e1", "linkText": "[A]", ...}]
    links: str = "[]"
    # JSON format: [{"fileName": ..., "originalName": ..., "mimeType": ..., ...}]
    attachments: str = "[]"
    deleted_at: datetime | None = Field(default=None, index=True)
