"""配置和 Schema 模块

提供 package.yaml 的加载、验证和保存功能。
"""

from .schema import SugarPackConfig, PackageModel, OutputModel
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    DEFAULT_CONFIG_NAME,
    load_config,
    validate_config,
    validate_config_with_result,
    save_config,
    config_loader
)

__all__ = [
    # 主要类
    "SugarPackConfig",
    "PackageModel",
    "OutputModel",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_config",
    "validate_config",
    "validate_config_with_result",
    "save_config",

    # 常量与单例
    "DEFAULT_CONFIG_NAME",
    "config_loader",
]
