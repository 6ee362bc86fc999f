"""SQLite implementations of the picker directories."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from anchor.domain.entities import EntityType, LinkableEntity, User
from anchor.infrastructure.persistence.models import (
    CollaboratorModel,
    LinkableEntityModel,
    UserModel,
)
from anchor.infrastructure.persistence.user_repository import to_user_entity


class SQLiteCollaboratorDirectory:
    """SQLite 版 CollaboratorDirectory 実装

    子どもの共同ケア参加者（メンション候補）を管理する。
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

    async def add_collaborator(
        self, child_id: str, user_id: str, role: str = "family"
    ) -> None:
        """共同ケア参加者を登録する（登録済みの場合はロールを更新）

        Args:
            child_id: 子ども ID
            user_id: ユーザー ID
            role: ロール（parent / clinician / family）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(CollaboratorModel).where(
                    CollaboratorModel.child_id == child_id,
                    CollaboratorModel.user_id == user_id,
                )
            )
            existing = result.first()
            if existing:
                existing.role = role
                session.add(existing)
            else:
                session.add(
                    CollaboratorModel(child_id=child_id, user_id=user_id, role=role)
                )
            await session.commit()

    async def list_collaborators(self, child_id: str) -> list[User]:
        """子どもの共同ケア参加者を取得する

        Args:
            child_id: 子ども ID

        Returns:
            ユーザーリスト（名前順）
        """
        async with self._session_factory() as session:
            statement = (
                select(UserModel)
                .join(
                    CollaboratorModel,
                    CollaboratorModel.user_id == UserModel.user_id,  # type: ignore[arg-type]
                )
                .where(CollaboratorModel.child_id == child_id)
                .order_by(UserModel.name)
            )
            result = await session.exec(statement)
            return [to_user_entity(model) for model in result.all()]


class SQLiteLinkableEntityDirectory:
    """SQLite 版 LinkableEntityDirectory 実装

    メッセージからリンク可能なエンティティ（Todo・ノート、薬、リマインダー、
    連絡先、医療データ）を管理する。
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

    async def save(
        self, entity_type: EntityType, child_id: str, entity: LinkableEntity
    ) -> None:
        """エンティティを保存する（upsert）

        Args:
            entity_type: エンティティ種別
            child_id: 子ども ID
            entity: 保存するエンティティ
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(LinkableEntityModel).where(
                    LinkableEntityModel.entity_type == entity_type.value,
                    LinkableEntityModel.entity_id == entity.id,
                )
            )
            model = result.first() or LinkableEntityModel(
                entity_type=entity_type.value,
                entity_id=entity.id,
                child_id=child_id,
            )
            model.child_id = child_id
            model.title = entity.title
            model.name = entity.name
            model.content = entity.content
            model.description = entity.description
            session.add(model)
            await session.commit()

    async def list_linkable_entities(
        self,
        entity_type: EntityType,
        child_id: str,
    ) -> list[LinkableEntity]:
        """子どもの指定種別エンティティを取得する

        Args:
            entity_type: エンティティ種別
            child_id: 子ども ID

        Returns:
            エンティティリスト（登録順）
        """
        async with self._session_factory() as session:
            statement = (
                select(LinkableEntityModel)
                .where(
                    LinkableEntityModel.entity_type == entity_type.value,
                    LinkableEntityModel.child_id == child_id,
                )
                .order_by(LinkableEntityModel.id)
            )
            result = await session.exec(statement)
            return [
                LinkableEntity(
                    id=model.entity_id,
                    title=model.title,
                    name=model.name,
                    content=model.content,
                    description=model.description,
                )
                for model in result.all()
            ]
