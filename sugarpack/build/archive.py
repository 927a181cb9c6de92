"""
归档写入器

负责安装包 zip 的完整生命周期：创建（不覆盖已有文件）、写入文件、
写入生成的内容、关闭。关闭后的归档不允许再写入。
"""

import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..errors import (
    AlreadyExistsError,
    ArchiveSealedError,
    ArchiveWriteError,
    InvalidNameError,
    MissingVersionError,
)
from ..utils import ensure_directory
from ..utils.logging import info, success, debug, LogStage, archive_logger
from .collector import FileEntry

DEFAULT_OUTPUT_DIR = "releases"
MANIFEST_ENTRY_NAME = "manifest.php"


def archive_filename(package_id: str, version: str) -> str:
    """安装包文件名: sugarcrm-{package_id}-{version}.zip"""
    return f"sugarcrm-{package_id}-{version}.zip"


def check_name_part(value: str, label: str) -> None:
    """检查用于拼接文件名的片段，安装包只能写在输出目录内

    Raises:
        InvalidNameError: 为空或包含路径分隔符、'..'、NUL
    """
    if not value or any(token in value for token in ('/', '\\', '..', '\x00')):
        raise InvalidNameError(f"{label} {value!r} 不能为空，且不能包含 '/'、'\\' 或 '..'")


@dataclass
class ArchiveHandle:
    """已打开的安装包归档"""
    path: Path
    zip_file: zipfile.ZipFile
    stream: BinaryIO
    entry_count: int = 0
    sealed: bool = False
    entry_names: list = field(default_factory=list)

    @property
    def filename(self) -> str:
        return self.path.name


class ArchiveWriter:
    """安装包归档写入器"""

    def __init__(
        self,
        work_dir: Union[str, Path],
        output_dir: str = DEFAULT_OUTPUT_DIR,
        compress_level: int = 6,
    ):
        """
        Args:
            work_dir: 工作目录
            output_dir: 输出目录（相对于工作目录）
            compress_level: Deflate 压缩级别（1-9）
        """
        self.work_dir = Path(work_dir)
        self.output_dir = output_dir
        self.compress_level = min(9, max(1, compress_level))

    def archive_path(self, version: str, package_id: str) -> Path:
        """计算安装包输出路径"""
        return self.work_dir / self.output_dir / archive_filename(package_id, version)

    def open(self, version: Optional[str], package_id: str) -> ArchiveHandle:
        """创建并打开新的安装包归档

        Args:
            version: 版本号
            package_id: 包标识

        Returns:
            ArchiveHandle: 归档句柄

        Raises:
            MissingVersionError: 版本号为空（此时不会创建任何目录或文件）
            InvalidNameError: 版本号或包标识包含路径成分（同样不会创建任何文件）
            AlreadyExistsError: 同名安装包已存在
            ArchiveWriteError: 无法创建归档文件
        """
        if not version or not version.strip():
            raise MissingVersionError()

        check_name_part(version, "版本号")
        check_name_part(package_id, "包标识")

        zip_path = self.archive_path(version, package_id)

        try:
            ensure_directory(zip_path.parent)
            # 'xb' 模式独占创建，已存在时直接失败，不会截断旧文件
            stream = open(zip_path, 'xb')
        except FileExistsError:
            raise AlreadyExistsError(zip_path) from None
        except OSError as e:
            raise ArchiveWriteError(f"无法创建安装包 {zip_path}: {e}") from e

        info(f"创建 {zip_path} ...", stage=LogStage.ARCHIVE)

        try:
            zf = zipfile.ZipFile(stream, 'w', zipfile.ZIP_DEFLATED, compresslevel=self.compress_level,
                                 strict_timestamps=False)
        except Exception:
            stream.close()
            zip_path.unlink(missing_ok=True)
            raise

        return ArchiveHandle(path=zip_path, zip_file=zf, stream=stream)

    def add_file(self, handle: ArchiveHandle, entry: FileEntry) -> None:
        """将源文件写入归档，条目名为文件的相对路径

        Raises:
            ArchiveSealedError: 归档已关闭
            ArchiveWriteError: 读取源文件或写入失败
        """
        self._check_open(handle)

        archive_logger.info(f" [*] {entry.relative_path}")

        try:
            handle.zip_file.write(entry.absolute_path, entry.relative_path)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ArchiveWriteError(f"添加文件到 zip 失败 {entry.absolute_path}: {e}") from e

        handle.entry_count += 1
        handle.entry_names.append(entry.relative_path)

    def add_content(self, handle: ArchiveHandle, entry_name: str, content: Union[str, bytes]) -> None:
        """将内存中生成的内容写入归档

        Raises:
            ArchiveSealedError: 归档已关闭
            ArchiveWriteError: 写入失败
        """
        self._check_open(handle)

        if isinstance(content, str):
            content = content.encode('utf-8')

        debug(f"写入生成内容 {entry_name} ({len(content)} bytes)", stage=LogStage.ARCHIVE)

        try:
            handle.zip_file.writestr(entry_name, content)
        except (OSError, ValueError) as e:
            raise ArchiveWriteError(f"写入 {entry_name} 失败: {e}") from e

        handle.entry_count += 1
        handle.entry_names.append(entry_name)

    def close(self, handle: ArchiveHandle) -> Path:
        """关闭归档，之后不允许再写入

        Returns:
            Path: 安装包路径
        """
        self._check_open(handle)

        try:
            handle.zip_file.close()
        except OSError as e:
            raise ArchiveWriteError(f"关闭安装包失败 {handle.path}: {e}") from e
        finally:
            handle.sealed = True
            handle.stream.close()

        success(f"完成创建 {handle.filename}", stage=LogStage.ARCHIVE)
        return handle.path

    def discard(self, handle: ArchiveHandle) -> None:
        """关闭并删除未完成的归档（构建失败时使用）"""
        if not handle.sealed:
            handle.sealed = True
            try:
                handle.zip_file.close()
            except (OSError, ValueError):
                # 归档本身就要删除，关闭失败无需处理
                pass
            handle.stream.close()

        handle.path.unlink(missing_ok=True)
        debug(f"已删除未完成的安装包 {handle.path}", stage=LogStage.ARCHIVE)

    @staticmethod
    def _check_open(handle: ArchiveHandle) -> None:
        if handle.sealed:
            raise ArchiveSealedError(f"安装包 {handle.filename} 已关闭，不能再写入")
