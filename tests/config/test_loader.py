"""設定ローダーのテスト"""

import os
from pathlib import Path
from typing import Generator

import pytest
import yaml

from anchor.config import (
    BackendKind,
    ComposerConfig,
    Config,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from anchor.domain.entities import EntityType


@pytest.fixture
def env_vars() -> Generator[dict[str, str], None, None]:
    """テスト用環境変数を設定・クリーンアップ"""
    test_vars = {
        "TEST_DATA_DIR": "/var/lib/anchor",
        "TEST_VAR_A": "valueA",
        "TEST_VAR_B": "valueB",
    }
    for key, value in test_vars.items():
        os.environ[key] = value
    yield test_vars
    for key in test_vars:
        os.environ.pop(key, None)


def write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(content)
    return config_path


class TestExpandEnvVars:
    """expand_env_vars関数のテスト"""

    def test_single_variable(self, env_vars: dict[str, str]) -> None:
        """単一の変数を展開できる"""
        assert expand_env_vars("${TEST_VAR_A}") == "valueA"

    def test_multiple_variables(self, env_vars: dict[str, str]) -> None:
        """複数の変数を展開できる"""
        assert expand_env_vars("${TEST_VAR_A}_${TEST_VAR_B}") == "valueA_valueB"

    def test_no_variables(self) -> None:
        """変数がない場合はそのまま返す"""
        assert expand_env_vars("plain text") == "plain text"

    def test_undefined_variable(self) -> None:
        """未設定の変数でEnvironmentVariableErrorが発生"""
        with pytest.raises(EnvironmentVariableError) as exc_info:
            expand_env_vars("${UNDEFINED_VAR_12345}")
        assert "UNDEFINED_VAR_12345" in str(exc_info.value)

    def test_empty_string(self) -> None:
        """空文字列はそのまま返す"""
        assert expand_env_vars("") == ""


class TestLoadConfig:
    """load_config関数のテスト"""

    def test_load_full_config(self, tmp_path: Path, env_vars: dict[str, str]) -> None:
        """全項目を指定した設定ファイルを読み込める"""
        config_path = write_config(
            tmp_path,
            """
database:
  path: ${TEST_DATA_DIR}/anchor.db
  echo: true

backend: unconfigured

composer:
  send_timeout_seconds: 5
  default_link_type: medication

logging:
  level: DEBUG
  loggers:
    sqlalchemy.engine: WARNING
""",
        )

        config = load_config(config_path)

        assert isinstance(config, Config)
        assert config.database.path == "/var/lib/anchor/anchor.db"
        assert config.database.echo is True
        assert config.backend is BackendKind.UNCONFIGURED
        assert config.composer == ComposerConfig(
            send_timeout_seconds=5.0,
            default_link_type=EntityType.MEDICATION,
        )
        assert config.logging is not None
        assert config.logging.level == "DEBUG"
        assert config.logging.loggers == {"sqlalchemy.engine": "WARNING"}

    def test_defaults(self, tmp_path: Path) -> None:
        """省略可能な項目にデフォルト値が適用される"""
        config_path = write_config(tmp_path, "database:\n  path: ./data/anchor.db\n")

        config = load_config(config_path)

        assert config.database.echo is False
        assert config.backend is BackendKind.SQLITE
        assert config.composer == ComposerConfig()
        assert config.logging is None

    def test_timeout_can_be_disabled(self, tmp_path: Path) -> None:
        """send_timeout_seconds に null を指定するとタイムアウトなし"""
        config_path = write_config(
            tmp_path,
            """
database:
  path: ./data/anchor.db
composer:
  send_timeout_seconds: null
""",
        )

        config = load_config(config_path)

        assert config.composer is not None
        assert config.composer.send_timeout_seconds is None

    def test_file_not_found(self, tmp_path: Path) -> None:
        """存在しないファイルでFileNotFoundErrorが発生"""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_missing_database(self, tmp_path: Path) -> None:
        """database セクションがない場合はエラー"""
        config_path = write_config(tmp_path, "backend: sqlite\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(config_path)
        assert "database" in str(exc_info.value)

    def test_missing_database_path(self, tmp_path: Path) -> None:
        """database.path がない場合はエラー"""
        config_path = write_config(tmp_path, "database:\n  path:\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(config_path)
        assert "database.path" in str(exc_info.value)

    def test_empty_file(self, tmp_path: Path) -> None:
        """空ファイルは必須項目の欠落として扱う"""
        config_path = write_config(tmp_path, "")

        with pytest.raises(ConfigValidationError):
            load_config(config_path)

    def test_invalid_backend(self, tmp_path: Path) -> None:
        """不正な backend 値は許可値を含むエラーになる"""
        config_path = write_config(
            tmp_path, "database:\n  path: x.db\nbackend: firebase\n"
        )

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(config_path)
        assert "sqlite, unconfigured" in str(exc_info.value)

    def test_invalid_link_type(self, tmp_path: Path) -> None:
        """不正な default_link_type はエラー"""
        config_path = write_config(
            tmp_path,
            "database:\n  path: x.db\ncomposer:\n  default_link_type: appointment\n",
        )

        with pytest.raises(ConfigValidationError):
            load_config(config_path)

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_non_positive_timeout(self, tmp_path: Path, timeout: int) -> None:
        """タイムアウトは正の値でなければならない"""
        config_path = write_config(
            tmp_path,
            f"database:\n  path: x.db\ncomposer:\n  send_timeout_seconds: {timeout}\n",
        )

        with pytest.raises(ConfigValidationError):
            load_config(config_path)

    def test_undefined_env_var(self, tmp_path: Path) -> None:
        """未設定の環境変数を参照するとエラー"""
        config_path = write_config(
            tmp_path, "database:\n  path: ${UNDEFINED_VAR_12345}/anchor.db\n"
        )

        with pytest.raises(EnvironmentVariableError):
            load_config(config_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """YAML構文エラー"""
        config_path = write_config(tmp_path, "database: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_config(config_path)
