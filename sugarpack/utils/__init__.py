"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    set_log_file,
    set_log_level,
    StageLogger,
    LogStage,
    OutputLevel,
    scan_logger,
    archive_logger,
    manifest_logger,
    done_logger,
)

from .paths import (
    ensure_directory,
    format_size,
    strip_prefix_segment,
    to_posix,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "set_log_file",
    "set_log_level",
    "StageLogger",
    "LogStage",
    "OutputLevel",
    "scan_logger",
    "archive_logger",
    "manifest_logger",
    "done_logger",

    # 路径相关
    "ensure_directory",
    "format_size",
    "strip_prefix_segment",
    "to_posix",
]
