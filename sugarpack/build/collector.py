"""
文件收集器

遍历源目录，收集其中的所有普通文件，并按路径分类器的结果
划分为"打包"和"排除"两组。
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from ..errors import ScanError
from .classifier import PathClassifier


@dataclass(frozen=True)
class FileEntry:
    """源目录中的一个文件"""
    absolute_path: Path  # 绝对路径
    relative_path: str  # 以源目录名开头的相对路径（正斜杠）

    def to_dict(self) -> Dict[str, str]:
        return {
            'absolute_path': str(self.absolute_path),
            'relative_path': self.relative_path,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """分类结果，两组内部均保持遍历顺序"""
    included: Tuple[FileEntry, ...] = ()
    excluded: Tuple[FileEntry, ...] = ()

    @property
    def all_entries(self) -> Tuple[FileEntry, ...]:
        return self.included + self.excluded

    def get_statistics(self) -> Dict[str, int]:
        """获取分类统计信息"""
        return {
            'included': len(self.included),
            'excluded': len(self.excluded),
            'total': len(self.included) + len(self.excluded),
        }


class TreeScanner:
    """源目录扫描器

    负责递归遍历源目录下的普通文件（目录本身与特殊文件不收集），
    并用路径分类器划分结果。
    """

    def __init__(
        self,
        work_dir: Union[str, Path],
        classifier: Optional[Callable[[str], bool]] = None,
    ):
        """
        Args:
            work_dir: 工作目录，源目录名相对于它解析
            classifier: 判断相对路径是否打包的函数，默认使用 PathClassifier
        """
        self.work_dir = Path(work_dir).absolute()
        self.classifier = classifier or PathClassifier()

    def scan(self, source_dir: str) -> ClassificationResult:
        """扫描源目录

        Args:
            source_dir: 源目录名（相对于工作目录）

        Returns:
            ClassificationResult: 分类结果

        Raises:
            ScanError: 源目录不存在或遍历失败
        """
        base_path = self.work_dir / source_dir

        if not base_path.is_dir():
            raise ScanError(f"源目录不存在或不是目录: {base_path}")

        included = []
        excluded = []

        for file_path in self._walk_directory(base_path):
            entry = FileEntry(
                absolute_path=file_path,
                relative_path=self._calculate_relative_path(file_path, base_path, source_dir),
            )
            if self.classifier(entry.relative_path):
                included.append(entry)
            else:
                excluded.append(entry)

        return ClassificationResult(included=tuple(included), excluded=tuple(excluded))

    def _walk_directory(self, directory: Path) -> Iterator[Path]:
        """递归遍历目录，只产出普通文件

        同一目录下的条目按名称排序，保证输出顺序稳定。
        不进入指向目录的符号链接。
        """
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(f"无法读取目录 {directory}: {e}") from e

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    yield from self._walk_directory(Path(entry.path))
                elif entry.is_file():
                    yield Path(entry.path)
            except OSError as e:
                raise ScanError(f"无法访问 {entry.path}: {e}") from e

    @staticmethod
    def _calculate_relative_path(file_path: Path, base_path: Path, source_dir: str) -> str:
        """计算以源目录名开头的相对路径"""
        below_root = file_path.relative_to(base_path).as_posix()
        return f"{source_dir.rstrip('/')}/{below_root}"


def scan_tree(work_dir: Union[str, Path], source_dir: str) -> ClassificationResult:
    """便捷函数：使用默认分类规则扫描源目录"""
    return TreeScanner(work_dir).scan(source_dir)
