"""
日志工具 - 统一输出门面

提供带时间戳、级别和阶段标记的统一输出接口，封装底层的 Rich Console。
打包过程中的逐文件进度、完成提示和排除清单都经由这里输出。
"""

import atexit
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from rich.console import Console
from rich.markup import escape


class OutputLevel:
    """输出级别常量"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogStage:
    """日志阶段标记"""
    INIT = "INIT"
    SCAN = "SCAN"
    ARCHIVE = "ARCHIVE"
    MANIFEST = "MANIFEST"
    BUILD = "BUILD"
    DONE = "DONE"


_LEVEL_ORDER = {
    OutputLevel.DEBUG: 0,
    OutputLevel.INFO: 1,
    OutputLevel.SUCCESS: 1,
    OutputLevel.WARNING: 2,
    OutputLevel.ERROR: 3,
}

_LEVEL_STYLES = {
    OutputLevel.DEBUG: "dim",
    OutputLevel.INFO: "default",
    OutputLevel.SUCCESS: "green",
    OutputLevel.WARNING: "yellow",
    OutputLevel.ERROR: "red bold",
}


class OutputFacade:
    """输出门面

    统一封装所有输出操作。所有输出都包含时间戳，终端输出带颜色，
    可选同时写入日志文件（纯文本，含日期）。
    """

    def __init__(self, stdout=None, stderr=None):
        self._lock = threading.RLock()
        self._file_handle = None  # type: Optional[Any]
        self._log_level = OutputLevel.INFO
        self._date_format = "%Y-%m-%d %H:%M:%S"
        self._time_format = "%H:%M:%S"

        # file 为 None 时 Rich 在每次输出时取当前的 sys.stdout / sys.stderr
        self._console = Console(
            file=stdout,
            soft_wrap=True,
            highlight=False,
            log_time=False,
            log_path=False,
        )
        self._error_console = Console(
            file=stderr,
            stderr=True,
            soft_wrap=True,
            highlight=False,
            log_time=False,
            log_path=False,
        )

    def _get_timestamp(self, include_date: bool = False) -> str:
        now = datetime.now()
        if include_date:
            return now.strftime(self._date_format)
        return now.strftime(self._time_format)

    def _should_output(self, level: str) -> bool:
        current_level = _LEVEL_ORDER.get(self._log_level, 1)
        return _LEVEL_ORDER.get(level, 1) >= current_level

    def _format_message(self, message: str, level: str = OutputLevel.INFO,
                        stage: Optional[str] = None, include_date: bool = False) -> str:
        """格式化纯文本消息（用于日志文件）"""
        timestamp = self._get_timestamp(include_date)

        if stage:
            return f"[{timestamp}] [{level}] [{stage}] {message}"
        return f"[{timestamp}] [{level}] {message}"

    def _emit(self, message: str, level: str, stage: Optional[str]) -> None:
        if not self._should_output(level):
            return

        with self._lock:
            timestamp = self._get_timestamp()
            # 文件路径里可能出现 [..]，需要转义以免被当作 Rich 标记
            body = escape(message)
            if stage:
                formatted = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] [cyan]{stage}[/cyan] {body}"
            else:
                formatted = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] {body}"

            console = self._error_console if level == OutputLevel.ERROR else self._console
            console.print(formatted, style=_LEVEL_STYLES.get(level, "default"))

            self._write_to_file(message, level, stage)

    def set_level(self, level: str) -> None:
        """设置输出级别"""
        with self._lock:
            if level in _LEVEL_ORDER:
                self._log_level = level

    def get_level(self) -> str:
        return self._log_level

    def set_log_file(self, file_path: Union[str, Path]) -> None:
        """设置日志文件（追加模式）"""
        with self._lock:
            self._close_file()
            log_path = Path(file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_path, 'a', encoding='utf-8')

    def _write_to_file(self, message: str, level: str, stage: Optional[str] = None) -> None:
        if not self._file_handle:
            return

        self._file_handle.write(self._format_message(message, level, stage, include_date=True) + "\n")
        self._file_handle.flush()

    def _close_file(self) -> None:
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def debug(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.DEBUG, stage)

    def info(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.INFO, stage)

    def success(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.SUCCESS, stage)

    def warning(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.WARNING, stage)

    def error(self, message: str, stage: Optional[str] = None) -> None:
        """错误信息（输出到 stderr）"""
        self._emit(message, OutputLevel.ERROR, stage)

    def close(self) -> None:
        """关闭输出门面"""
        with self._lock:
            self._close_file()


# 全局输出门面实例
_output_facade: Optional[OutputFacade] = None


def get_output_facade() -> OutputFacade:
    """获取全局输出门面实例"""
    global _output_facade
    if _output_facade is None:
        _output_facade = OutputFacade()
    return _output_facade


def debug(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().debug(message, stage)


def info(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().info(message, stage)


def success(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().success(message, stage)


def warning(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().warning(message, stage)


def error(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().error(message, stage)


def set_log_level(level: str) -> None:
    """设置全局日志级别"""
    get_output_facade().set_level(level)


def set_log_file(file_path: Union[str, Path]) -> None:
    """设置全局日志文件"""
    get_output_facade().set_log_file(file_path)


def close_logger() -> None:
    """关闭日志系统"""
    global _output_facade
    if _output_facade:
        _output_facade.close()
        _output_facade = None


class StageLogger:
    """绑定固定阶段的日志器"""

    def __init__(self, stage: str):
        self.stage = stage

    def debug(self, message: str) -> None:
        debug(message, self.stage)

    def info(self, message: str) -> None:
        info(message, self.stage)

    def success(self, message: str) -> None:
        success(message, self.stage)

    def warning(self, message: str) -> None:
        warning(message, self.stage)

    def error(self, message: str) -> None:
        error(message, self.stage)


def get_stage_logger(stage: str) -> StageLogger:
    return StageLogger(stage)


def configure_logging(level: str = OutputLevel.INFO, log_file: Optional[Union[str, Path]] = None) -> None:
    """配置日志系统

    Args:
        level: 输出级别（DEBUG/INFO/WARNING/ERROR）
        log_file: 可选的日志文件路径
    """
    set_log_level(level)
    if log_file:
        set_log_file(log_file)


scan_logger = get_stage_logger(LogStage.SCAN)
archive_logger = get_stage_logger(LogStage.ARCHIVE)
manifest_logger = get_stage_logger(LogStage.MANIFEST)
done_logger = get_stage_logger(LogStage.DONE)


atexit.register(close_logger)
