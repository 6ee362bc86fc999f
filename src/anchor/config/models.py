"""設定データクラス"""

from dataclasses import dataclass
from enum import Enum

from anchor.domain.entities import EntityType


class BackendKind(Enum):
    """メッセージ送信バックエンドの種類"""

    SQLITE = "sqlite"
    UNCONFIGURED = "unconfigured"


@dataclass
class DatabaseConfig:
    """データベース設定

    Attributes:
        path: SQLite ファイルのパス（":memory:" でインメモリ）
        echo: 実行した SQL をログに出力するか
    """

    path: str
    echo: bool = False


@dataclass
class ComposerConfig:
    """メッセージ作成設定

    Attributes:
        send_timeout_seconds: 送信タイムアウト秒数（None で無制限）
        default_link_type: リンクピッカーの初期エンティティ種別
    """

    send_timeout_seconds: float | None = 30.0
    default_link_type: EntityType = EntityType.ENTRY


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """アプリケーション設定"""

    database: DatabaseConfig
    backend: BackendKind = BackendKind.SQLITE
    composer: ComposerConfig | None = None
    logging: LoggingConfig | None = None
