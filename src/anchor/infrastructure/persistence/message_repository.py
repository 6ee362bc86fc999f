"""SQLite implementation of MessageRepository."""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from anchor.domain.entities import AttachmentRecord, EntityLink, Mention, Message, User
from anchor.domain.exceptions import InvalidSpanRangeError
from anchor.infrastructure.persistence.datetime_utils import (
    normalize_optional_to_utc,
    normalize_to_utc,
)
from anchor.infrastructure.persistence.exceptions import CorruptRecordError
from anchor.infrastructure.persistence.models import MessageModel, UserModel
from anchor.infrastructure.persistence.user_repository import to_user_entity


class SQLiteMessageRepository:
    """SQLite 版 MessageRepository 実装

    メッセージの CRUD 操作を SQLite データベースに対して行う。
    メンション・リンク・添付ファイルは JSON 文字列として保存し、
    著者とメンション対象の表示名は users テーブルから解決する。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def save(self, message: Message) -> None:
        """メッセージを保存する（upsert）

        既存のメッセージが存在する場合は本文・スパン・添付ファイルを置き換える。

        Args:
            message: 保存するメッセージ
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(MessageModel).where(MessageModel.message_id == message.id)
            )
            existing = result.first()

            if existing:
                existing.body = message.body
                existing.edited_at = message.edited_at
                existing.deleted_at = message.deleted_at
                existing.mentions = _dump_mentions(message.mentions)
                existing.links = _dump_links(message.links)
                existing.attachments = _dump_attachments(message.attachments)
                session.add(existing)
            else:
                session.add(self._to_model(message))

            await session.commit()

    async def find_by_id(self, message_id: str) -> Message | None:
        """ID でメッセージを検索する

        Args:
            message_id: メッセージ ID

        Returns:
            メッセージ（存在しない場合は None）
        """
        async with self._session_factory() as session:
            statement = select(MessageModel).where(
                MessageModel.message_id == message_id
            )
            result = await session.exec(statement)
            model = result.first()
            if model is None:
                return None
            return (await self._to_entities(session, [model]))[0]

    async def find_by_child(
        self,
        child_id: str,
        limit: int = 50,
        include_deleted: bool = False,
    ) -> list[Message]:
        """子どものフィードのトップレベルメッセージを取得する

        Args:
            child_id: 子ども ID
            limit: 取得する最大件数
            include_deleted: 論理削除済みメッセージを含めるか

        Returns:
            メッセージリスト（新しい順）
        """
        async with self._session_factory() as session:
            statement = select(MessageModel).where(
                MessageModel.child_id == child_id,
                MessageModel.reply_to_id.is_(None),  # type: ignore[union-attr]
            )
            if not include_deleted:
                statement = statement.where(
                    MessageModel.deleted_at.is_(None)  # type: ignore[union-attr]
                )
            statement = statement.order_by(
                MessageModel.created_at.desc()  # type: ignore[union-attr]
            ).limit(limit)
            result = await session.exec(statement)
            return await self._to_entities(session, list(result.all()))

    async def find_replies(
        self,
        message_ids: list[str],
        include_deleted: bool = False,
    ) -> list[Message]:
        """指定メッセージへの返信を取得する

        Args:
            message_ids: 親メッセージ ID のリスト
            include_deleted: 論理削除済みメッセージを含めるか

        Returns:
            メッセージリスト（古い順）
        """
        if not message_ids:
            return []
        async with self._session_factory() as session:
            statement = select(MessageModel).where(
                col(MessageModel.reply_to_id).in_(message_ids)
            )
            if not include_deleted:
                statement = statement.where(
                    MessageModel.deleted_at.is_(None)  # type: ignore[union-attr]
                )
            statement = statement.order_by(
                MessageModel.created_at.asc()  # type: ignore[union-attr]
            )
            result = await session.exec(statement)
            return await self._to_entities(session, list(result.all()))

    async def soft_delete(self, message_id: str, deleted_at: datetime) -> bool:
        """メッセージを論理削除する

        Args:
            message_id: メッセージ ID
            deleted_at: 削除日時

        Returns:
            削除対象が存在した場合 True
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(MessageModel).where(MessageModel.message_id == message_id)
            )
            model = result.first()
            if model is None:
                return False
            model.deleted_at = deleted_at
            session.add(model)
            await session.commit()
            return True

    async def _to_entities(
        self, session: AsyncSession, models: list[MessageModel]
    ) -> list[Message]:
        """モデルをエンティティに変換する（ユーザー情報をまとめて解決）"""
        if not models:
            return []

        parsed_mentions = {m.message_id: _load_json(m, "mentions") for m in models}
        user_ids = {m.author_id for m in models}
        for mentions in parsed_mentions.values():
            user_ids.update(
                str(item["userId"])
                for item in mentions
                if isinstance(item, dict) and "userId" in item
            )

        result = await session.exec(
            select(UserModel).where(col(UserModel.user_id).in_(user_ids))
        )
        users = {model.user_id: to_user_entity(model) for model in result.all()}

        return [
            self._to_entity(model, parsed_mentions[model.message_id], users)
            for model in models
        ]

    def _to_entity(
        self,
        model: MessageModel,
        mentions_data: list[dict[str, Any]],
        users: dict[str, User],
    ) -> Message:
        """モデルをエンティティに変換する

        Args:
            model: MessageModel インスタンス
            mentions_data: パース済みのメンション JSON
            users: ユーザー ID をキーとするユーザー

        Returns:
            Message エンティティ

        Raises:
            CorruptRecordError: 保存データが不正
        """
        try:
            mentions = [
                Mention.from_wire(
                    item,
                    display_name=_display_name(users, str(item["userId"])),
                )
                for item in mentions_data
            ]
            links = [EntityLink.from_wire(item) for item in _load_json(model, "links")]
            attachments = [
                AttachmentRecord(
                    file_name=item["fileName"],
                    original_name=item["originalName"],
                    mime_type=item["mimeType"],
                    size=int(item["size"]),
                    url=item["url"],
                    thumbnail_url=item.get("thumbnailUrl"),
                )
                for item in _load_json(model, "attachments")
            ]
        except (KeyError, ValueError, TypeError, InvalidSpanRangeError) as e:
            raise CorruptRecordError(
                f"Message {model.message_id} has malformed annotations: {e}"
            ) from e

        author = users.get(model.author_id) or User(id=model.author_id, name="")

        return Message(
            id=model.message_id,
            child_id=model.child_id,
            author=author,
            body=model.body,
            created_at=normalize_to_utc(model.created_at),
            edited_at=normalize_optional_to_utc(model.edited_at),
            reply_to_id=model.reply_to_id,
            attachments=attachments,
            mentions=mentions,
            links=links,
            deleted_at=normalize_optional_to_utc(model.deleted_at),
        )

    def _to_model(self, entity: Message) -> MessageModel:
        """エンティティをモデルに変換する

        Args:
            entity: Message エンティティ

        Returns:
            MessageModel インスタンス
        """
        return MessageModel(
            message_id=entity.id,
            child_id=entity.child_id,
            author_id=entity.author.id,
            body=entity.body,
            created_at=entity.created_at,
            edited_at=entity.edited_at,
            reply_to_id=entity.reply_to_id,
            mentions=_dump_mentions(entity.mentions),
            links=_dump_links(entity.links),
            attachments=_dump_attachments(entity.attachments),
            deleted_at=entity.deleted_at,
        )


def _display_name(users: dict[str, User], user_id: str) -> str:
    user = users.get(user_id)
    return user.name if user else ""


def _load_json(model: MessageModel, column: str) -> list[dict[str, Any]]:
    raw = getattr(model, column)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptRecordError(
            f"Message {model.message_id} has invalid {column} JSON"
        ) from e
    if not isinstance(data, list):
        raise CorruptRecordError(
            f"Message {model.message_id} {column} is not a JSON array"
        )
    return data


def _dump_mentions(mentions: list[Mention]) -> str:
    return json.dumps([mention.to_wire() for mention in mentions])


def _dump_links(links: list[EntityLink]) -> str:
    return json.dumps([link.to_wire() for link in links])


def _dump_attachments(attachments: list[AttachmentRecord]) -> str:
    return json.dumps(
        [
            {
                "fileName": a.file_name,
                "originalName": a.original_name,
                "mimeType": a.mime_type,
                "size": a.size,
                "url": a.url,
                "thumbnailUrl": a.thumbnail_url,
            }
            for a in attachments
        ]
    )
