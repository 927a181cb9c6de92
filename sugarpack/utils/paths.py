"""
路径工具

提供路径处理相关的工具函数。
"""

from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def to_posix(path: str) -> str:
    """将路径中的反斜杠统一为正斜杠"""
    return path.replace('\\', '/')


def strip_prefix_segment(path: str, prefix: str) -> str:
    """去掉路径开头的 ``prefix/`` 或 ``prefix\\`` 段

    前缀不匹配时原样返回。

    Args:
        path: 相对路径
        prefix: 要去掉的首段目录名

    Returns:
        str: 去掉前缀后的路径
    """
    for separator in ('/', '\\'):
        head = prefix + separator
        if path.startswith(head):
            return path[len(head):]
    return path


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
