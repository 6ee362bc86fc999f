"""Message repository protocol."""

from datetime import datetime
from typing import Protocol

from anchor.domain.entities import Message


class MessageRepository(Protocol):
    """メッセージリポジトリの抽象インターフェース

    メッセージの保存・取得を抽象化し、
    永続化層の実装詳細を隠蔽する。
    """

    async def save(self, message: Message) -> None:
        """メッセージを保存する

        既存のメッセージ（同一の message_id）が存在する場合は
        本文・スパン・添付ファイルを丸ごと置き換える。

        Args:
            message: 保存するメッセージ
        """
        ...

    async def find_by_id(self, message_id: str) -> Message | None:
        """ID でメッセージを検索する

        Args:
            message_id: メッセージ ID

        Returns:
            メッセージ（存在しない場合は None）
        """
        ...

    async def find_by_child(
        self,
        child_id: str,
        limit: int = 50,
        include_deleted: bool = False,
    ) -> list[Message]:
        """子どものフィードのトップレベルメッセージを取得する

        返信（reply_to_id を持つメッセージ）は含まない。

        Args:
            child_id: 子ども ID
            limit: 取得する最大件数
            include_deleted: 論理削除済みメッセージを含めるか

        Returns:
            メッセージリスト（新しい順）
        """
        ...

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
        ...

    async def soft_delete(self, message_id: str, deleted_at: datetime) -> bool:
        """メッセージを論理削除する

        Args:
            message_id: メッセージ ID
            deleted_at: 削除日時

        Returns:
            削除対象が存在した場合 True
        """
        ...
