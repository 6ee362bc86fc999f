"""User repository protocol."""

from typing import Protocol

from anchor.domain.entities import User


class UserRepository(Protocol):
    """ユーザーリポジトリの抽象インターフェース"""

    async def save(self, user: User) -> None:
        """ユーザーを保存する（upsert）

        Args:
            user: 保存するユーザー
        """
        ...

    async def find_by_id(self, user_id: str) -> User | None:
        """ID でユーザーを検索する

        Args:
            user_id: ユーザー ID

        Returns:
            ユーザー（存在しない場合は None）
        """
        ...

    async def find_by_ids(self, user_ids: list[str]) -> dict[str, User]:
        """複数 ID でユーザーを検索する

        Args:
            user_ids: ユーザー ID のリスト

        Returns:
            ユーザー ID をキーとする dict（存在しない ID は含まない）
        """
        ...
