"""Tests for the command-line entry point."""

import logging
from pathlib import Path
from unittest.mock import Mock

import pytest

from anchor.__main__ import (
    build_message_sender,
    configure_logging,
    create_parser,
    main,
)
from anchor.config import BackendKind, Config, DatabaseConfig, LoggingConfig
from anchor.domain.entities import EntityType, LinkableEntity, User
from anchor.infrastructure.persistence import (
    DatabaseManager,
    DBMessageSender,
    SQLiteLinkableEntityDirectory,
    SQLiteUserRepository,
    UnconfiguredMessageSender,
)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "anchor.db"


def write_config(tmp_path: Path, db_path: Path, backend: str = "sqlite") -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"database:\n  path: {db_path}\nbackend: {backend}\n")
    return config_path


@pytest.fixture
async def seeded_db(db_path: Path) -> Path:
    """Database with two users and one medication."""
    manager = DatabaseManager(str(db_path))
    await manager.create_tables()
    users = SQLiteUserRepository(manager.get_session)
    await users.save(User(id="u1", name="Ann"))
    await users.save(User(id="u2", name="Bob"))
    await SQLiteLinkableEntityDirectory(manager.get_session).save(
        EntityType.MEDICATION, "c1", LinkableEntity(id="e1", name="Tylenol")
    )
    await manager.dispose()
    return db_path


class TestConfigureLogging:
    """configure_logging tests."""

    def test_none_keeps_defaults(self) -> None:
        root_level = logging.getLogger().level

        configure_logging(None)

        assert logging.getLogger().level == root_level

    def test_individual_loggers(self) -> None:
        root_logger = logging.getLogger()
        original_level = root_logger.level
        try:
            configure_logging(
                LoggingConfig(level="WARNING", loggers={"anchor.test": "DEBUG"})
            )

            assert root_logger.level == logging.WARNING
            assert logging.getLogger("anchor.test").level == logging.DEBUG
        finally:
            root_logger.setLevel(original_level)
            logging.getLogger("anchor.test").setLevel(logging.NOTSET)


class TestBuildMessageSender:
    """build_message_sender tests."""

    def test_sqlite_backend(self) -> None:
        config = Config(database=DatabaseConfig(path=":memory:"))

        assert isinstance(build_message_sender(config, Mock()), DBMessageSender)

    def test_unconfigured_backend(self) -> None:
        config = Config(
            database=DatabaseConfig(path=":memory:"),
            backend=BackendKind.UNCONFIGURED,
        )

        assert isinstance(
            build_message_sender(config, Mock()), UnconfiguredMessageSender
        )


class TestCreateParser:
    """create_parser tests."""

    def test_send_arguments(self) -> None:
        args = create_parser().parse_args(
            [
                "send",
                "c1",
                "u1",
                "Hello",
                "--mention",
                "u2",
                "--mention",
                "u3",
                "--link",
                "medication:e1",
                "--reply-to",
                "m0",
            ]
        )

        assert args.command == "send"
        assert args.mention == ["u2", "u3"]
        assert args.link == ["medication:e1"]
        assert args.reply_to == "m0"
        assert args.config == "config.yaml"

    def test_feed_arguments(self) -> None:
        args = create_parser().parse_args(["feed", "c1", "--limit", "5"])

        assert args.limit == 5
        assert args.viewer is None


class TestMain:
    """main tests."""

    async def test_no_command(self) -> None:
        assert await main([]) == 1

    async def test_missing_config(self, tmp_path: Path) -> None:
        assert await main(["--config", str(tmp_path / "missing.yaml"), "init-db"]) == 1

    async def test_invalid_config(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text("backend: sqlite\n")

        assert await main(["--config", str(config_path), "init-db"]) == 1

    async def test_init_db(self, tmp_path: Path, db_path: Path) -> None:
        config_path = write_config(tmp_path, db_path)

        assert await main(["--config", str(config_path), "init-db"]) == 0
        assert db_path.exists()

    async def test_empty_feed(
        self, tmp_path: Path, db_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_path = write_config(tmp_path, db_path)

        assert await main(["--config", str(config_path), "feed", "c1"]) == 0
        assert "No messages yet" in capsys.readouterr().out

    async def test_send_and_show_feed(
        self, tmp_path: Path, seeded_db: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test sending an annotated message and reading it back."""
        config_path = write_config(tmp_path, seeded_db)

        exit_code = await main(
            [
                "--config",
                str(config_path),
                "send",
                "c1",
                "u1",
                "Please give",
                "--mention",
                "u2",
                "--link",
                "medication:e1",
            ]
        )
        assert exit_code == 0
        message_id = capsys.readouterr().out.strip()
        assert message_id

        exit_code = await main(
            ["--config", str(config_path), "feed", "c1", "--viewer", "u1"]
        )
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Ann *: Please give **@Bob** [Tylenol](/medications/e1)" in out

    async def test_send_unknown_author(self, tmp_path: Path, seeded_db: Path) -> None:
        config_path = write_config(tmp_path, seeded_db)

        assert (
            await main(["--config", str(config_path), "send", "c1", "nobody", "Hi"])
            == 1
        )

    async def test_send_unknown_entity(self, tmp_path: Path, seeded_db: Path) -> None:
        config_path = write_config(tmp_path, seeded_db)

        exit_code = await main(
            [
                "--config",
                str(config_path),
                "send",
                "c1",
                "u1",
                "Hi",
                "--link",
                "medication:missing",
            ]
        )

        assert exit_code == 1

    async def test_send_blank_message(self, tmp_path: Path, seeded_db: Path) -> None:
        config_path = write_config(tmp_path, seeded_db)

        assert (
            await main(["--config", str(config_path), "send", "c1", "u1", "   "])
            == 1
        )

    async def test_send_unconfigured_backend(
        self, tmp_path: Path, seeded_db: Path
    ) -> None:
        config_path = write_config(tmp_path, seeded_db, backend="unconfigured")

        assert (
            await main(["--config", str(config_path), "send", "c1", "u1", "Hi"]) == 1
        )
