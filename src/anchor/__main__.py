"""アプリケーションのエントリポイント"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from anchor.application.use_cases import MessageComposer, MessageFeedUseCase
from anchor.config import (
    BackendKind,
    ComposerConfig,
    Config,
    ConfigError,
    LoggingConfig,
    load_config,
)
from anchor.domain.entities import EntityType
from anchor.domain.exceptions import MessagingError
from anchor.domain.repositories import MessageRepository
from anchor.domain.services import MessageSender
from anchor.domain.services.message_formatter import format_segments
from anchor.infrastructure.persistence import (
    DatabaseManager,
    DBMessageSender,
    PersistenceError,
    SQLiteCollaboratorDirectory,
    SQLiteLinkableEntityDirectory,
    SQLiteMessageRepository,
    SQLiteUserRepository,
    UnconfiguredMessageSender,
)
from anchor.presentation import MessageView, build_feed_views

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def build_message_sender(
    config: Config, message_repository: MessageRepository
) -> MessageSender:
    """設定に応じたメッセージ送信バックエンドを生成する"""
    if config.backend is BackendKind.UNCONFIGURED:
        return UnconfiguredMessageSender()
    return DBMessageSender(message_repository)


def create_parser() -> argparse.ArgumentParser:
    """コマンドライン引数パーサーを生成する"""
    parser = argparse.ArgumentParser(
        prog="anchor",
        description="Anchor family care messaging",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="設定ファイルのパス (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="テーブルを作成")

    feed_parser = subparsers.add_parser("feed", help="子どものメッセージフィードを表示")
    feed_parser.add_argument("child_id", help="子ども ID")
    feed_parser.add_argument(
        "--limit", type=int, default=50, help="表示件数 (default: 50)"
    )
    feed_parser.add_argument("--viewer", default=None, help="閲覧ユーザー ID")

    send_parser = subparsers.add_parser("send", help="メッセージを送信")
    send_parser.add_argument("child_id", help="子ども ID")
    send_parser.add_argument("author_id", help="送信ユーザー ID")
    send_parser.add_argument("text", help="本文")
    send_parser.add_argument("--reply-to", default=None, help="返信先メッセージ ID")
    send_parser.add_argument(
        "--mention",
        action="append",
        default=[],
        metavar="USER_ID",
        help="本文末尾にメンションを追加（複数指定可）",
    )
    send_parser.add_argument(
        "--link",
        action="append",
        default=[],
        metavar="TYPE:ENTITY_ID",
        help="本文末尾にエンティティリンクを追加（例: medication:e1）",
    )

    return parser


def format_view(view: MessageView, indent: str = "") -> list[str]:
    """MessageView をテキスト行に変換する"""
    edited = " (edited)" if view.is_edited else ""
    own = " *" if view.is_own_message else ""
    lines = [
        f"{indent}[{view.day_label} {view.time_label}] {view.author_label}{own}: "
        f"{format_segments(view.segments)}{edited}"
    ]
    for attachment in view.attachments:
        lines.append(
            f"{indent}  + {attachment.name} ({attachment.size_label}) {attachment.url}"
        )
    for reply in view.replies:
        lines.extend(format_view(reply, indent + "    "))
    return lines


async def show_feed(args: argparse.Namespace, db_manager: DatabaseManager) -> int:
    """フィードを表示する"""
    message_repository = SQLiteMessageRepository(db_manager.get_session)
    feed = MessageFeedUseCase(message_repository)
    items = await feed.list_messages(args.child_id, limit=args.limit)
    today = datetime.now(timezone.utc).date()
    views = build_feed_views(items, today, viewer_id=args.viewer)

    if not views:
        print("No messages yet")
    for view in views:
        print("\n".join(format_view(view)))
    return 0


def _parse_link_arg(value: str) -> tuple[EntityType, str]:
    entity_type, _, entity_id = value.partition(":")
    if not entity_id:
        raise ValueError(f"Link must be TYPE:ENTITY_ID, got '{value}'")
    return EntityType(entity_type), entity_id


async def send_message(
    args: argparse.Namespace, config: Config, db_manager: DatabaseManager
) -> int:
    """MessageComposer を使ってメッセージを送信する"""
    message_repository = SQLiteMessageRepository(db_manager.get_session)
    user_repository = SQLiteUserRepository(db_manager.get_session)
    entity_directory = SQLiteLinkableEntityDirectory(db_manager.get_session)
    composer_config = config.composer or ComposerConfig()

    author = await user_repository.find_by_id(args.author_id)
    if author is None:
        logger.error("User not found: %s", args.author_id)
        return 1

    composer = MessageComposer(
        sender=build_message_sender(config, message_repository),
        child_id=args.child_id,
        author=author,
        collaborator_directory=SQLiteCollaboratorDirectory(db_manager.get_session),
        entity_directory=entity_directory,
        send_timeout=composer_config.send_timeout_seconds,
        default_link_type=composer_config.default_link_type,
    )
    if args.reply_to:
        composer.open_reply(args.reply_to)
    composer.set_body(args.text)
    composer.set_cursor(len(composer.body))

    try:
        mentioned = await user_repository.find_by_ids(args.mention)
        for user_id in args.mention:
            if user_id not in mentioned:
                logger.error("User not found: %s", user_id)
                return 1
            composer.replace_range(len(composer.body), len(composer.body), " ")
            composer.insert_mention(mentioned[user_id])

        for value in args.link:
            entity_type, entity_id = _parse_link_arg(value)
            entities = await composer.load_linkable_entities(entity_type)
            entity = next((e for e in entities if e.id == entity_id), None)
            if entity is None:
                logger.error("Entity not found: %s", value)
                return 1
            composer.replace_range(len(composer.body), len(composer.body), " ")
            composer.insert_link(entity)

        receipt = await composer.submit()
    except (MessagingError, ValueError) as e:
        logger.error("Failed to send message: %s", e)
        return 1

    print(receipt.message_id)
    return 0


async def main(argv: list[str] | None = None) -> int:
    """アプリケーションを起動する

    Args:
        argv: コマンドライン引数（None の場合は sys.argv）

    Returns:
        終了コード
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error("%s not found", config_path)
        return 1

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    configure_logging(config.logging)

    db_manager = DatabaseManager(config.database.path, echo=config.database.echo)
    try:
        await db_manager.create_tables()

        if args.command == "init-db":
            logger.info("Database ready: %s", config.database.path)
            return 0
        if args.command == "feed":
            return await show_feed(args, db_manager)
        return await send_message(args, config, db_manager)
    except PersistenceError as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        await db_manager.dispose()


def run() -> None:
    """Run the async main function."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
