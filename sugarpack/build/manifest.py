"""
Manifest 构建器

根据打包文件列表生成安装描述符（installdefs）中的 copy 指令，
并与调用方提供的 manifest 元数据一起序列化为 manifest.php。
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import DescriptorTypeError
from ..utils.paths import strip_prefix_segment
from .collector import FileEntry
from .php_export import render_manifest_file, validate_descriptor

BASEPATH_PREFIX = "<basepath>/"


@dataclass(frozen=True)
class CopyInstruction:
    """一条安装时的文件复制指令"""
    from_path: str
    to_path: str

    def to_dict(self) -> Dict[str, str]:
        return {'from': self.from_path, 'to': self.to_path}

    @classmethod
    def for_entry(cls, entry: FileEntry, source_dir: str) -> 'CopyInstruction':
        """为打包文件生成复制指令

        from 为 ``<basepath>/`` 加相对路径；to 为去掉源目录名首段后的路径。
        """
        return cls(
            from_path=BASEPATH_PREFIX + entry.relative_path,
            to_path=strip_prefix_segment(entry.relative_path, source_dir),
        )


@dataclass(frozen=True)
class SerializedDescriptor:
    """序列化后的描述符"""
    manifest: Mapping[str, Any]
    installdefs: Mapping[str, Any]
    content: str
    copy_instructions: Tuple[CopyInstruction, ...] = ()


class ManifestBuilder:
    """Manifest 构建器"""

    def add_copy_instructions(
        self,
        installdefs: Optional[Mapping[str, Any]],
        included: Iterable[FileEntry],
        source_dir: str,
    ) -> Tuple[Dict[str, Any], Tuple[CopyInstruction, ...]]:
        """在安装描述符的 copy 列表后追加复制指令

        不修改传入的 installdefs，返回新的描述符。已有的 copy 条目保留在前面。

        Args:
            installdefs: 调用方提供的安装描述符（可预先包含其他安装动作）
            included: 打包文件列表
            source_dir: 源目录名

        Returns:
            Tuple: (新的安装描述符, 生成的复制指令)

        Raises:
            DescriptorTypeError: 已有的 copy 不是列表
        """
        result = copy.deepcopy(dict(installdefs or {}))

        existing = result.get('copy', [])
        if not isinstance(existing, (list, tuple)):
            raise DescriptorTypeError(f"installdefs['copy'] 必须是列表，实际为 {type(existing).__name__}")

        instructions = tuple(CopyInstruction.for_entry(entry, source_dir) for entry in included)

        copy_list: List[Any] = list(existing)
        copy_list.extend(instruction.to_dict() for instruction in instructions)
        result['copy'] = copy_list

        return result, instructions

    def build(
        self,
        manifest: Mapping[str, Any],
        installdefs: Optional[Mapping[str, Any]],
        included: Iterable[FileEntry],
        source_dir: str,
    ) -> SerializedDescriptor:
        """构建并序列化描述符

        Args:
            manifest: manifest 元数据（原样写入）
            installdefs: 安装描述符
            included: 打包文件列表
            source_dir: 源目录名

        Returns:
            SerializedDescriptor: 包含 manifest.php 文本

        Raises:
            DescriptorTypeError: 描述符中存在无法导出的值
        """
        validate_descriptor(manifest, "$manifest")

        new_installdefs, instructions = self.add_copy_instructions(installdefs, included, source_dir)
        validate_descriptor(new_installdefs, "$installdefs")

        return SerializedDescriptor(
            manifest=manifest,
            installdefs=new_installdefs,
            content=render_manifest_file(manifest, new_installdefs),
            copy_instructions=instructions,
        )
