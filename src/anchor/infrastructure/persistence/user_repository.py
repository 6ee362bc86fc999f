"""SQLite implementation of UserRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from anchor.domain.entities import User
from anchor.infrastructure.persistence.models import UserModel


class SQLiteUserRepository:
    """SQLite 版 UserRepository 実装

    ユーザー情報の CRUD 操作を SQLite データベースに対して行う。
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

    async def save(self, user: User) -> None:
        """ユーザー情報を保存する（upsert）

        Args:
            user: 保存するユーザー
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(UserModel).where(UserModel.user_id == user.id)
            )
            existing = result.first()

            if existing:
                existing.name = user.name
                existing.email = user.email
                existing.avatar = user.avatar
                existing.updated_at = datetime.now(timezone.utc)
                session.add(existing)
            else:
                session.add(to_user_model(user))

            await session.commit()

    async def find_by_id(self, user_id: str) -> User | None:
        """ID でユーザーを検索する

        Args:
            user_id: ユーザー ID

        Returns:
            ユーザー（存在しない場合は None）
        """
        async with self._session_factory() as session:
            statement = select(UserModel).where(UserModel.user_id == user_id)
            result = await session.exec(statement)
            model = result.first()
            if model is None:
                return None
            return to_user_entity(model)

    async def find_by_ids(self, user_ids: list[str]) -> dict[str, User]:
        """複数 ID でユーザーを検索する

        Args:
            user_ids: ユーザー ID のリスト

        Returns:
            ユーザー ID をキーとする dict
        """
        if not user_ids:
            return {}
        async with self._session_factory() as session:
            statement = select(UserModel).where(
                col(UserModel.user_id).in_(set(user_ids))
            )
            result = await session.exec(statement)
            return {model.user_id: to_user_entity(model) for model in result.all()}


def to_user_entity(model: UserModel) -> User:
    """モデルをエンティティに変換する"""
    return User(
        id=model.user_id,
        name=model.name,
        email=model.email,
        avatar=model.avatar,
    )


def to_user_model(user: User) -> UserModel:
    """エンティティをモデルに変換する"""
    return UserModel(
        user_id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
    )
