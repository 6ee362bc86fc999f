"""設定管理モジュール"""

from anchor.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from anchor.config.models import (
    BackendKind,
    ComposerConfig,
    Config,
    DatabaseConfig,
    LoggingConfig,
)

__all__ = [
    "BackendKind",
    "ComposerConfig",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "EnvironmentVariableError",
    "LoggingConfig",
    "expand_env_vars",
    "load_config",
]
