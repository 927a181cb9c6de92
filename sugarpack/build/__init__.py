"""构建服务模块

提供安装包构建的核心功能。
"""

from .archive import ArchiveHandle, ArchiveWriter, MANIFEST_ENTRY_NAME, archive_filename
from .builder import PackageArtifact, PackageAssembler, build_package
from .classifier import PathClassifier, should_include
from .collector import ClassificationResult, FileEntry, TreeScanner, scan_tree
from .manifest import CopyInstruction, ManifestBuilder, SerializedDescriptor
from .php_export import (
    export_value,
    load_manifest_file,
    parse_value,
    render_manifest_file,
    validate_descriptor,
)

__all__ = [
    # 主构建器
    "PackageAssembler",
    "PackageArtifact",
    "build_package",

    # 文件分类与收集
    "PathClassifier",
    "should_include",
    "TreeScanner",
    "FileEntry",
    "ClassificationResult",
    "scan_tree",

    # 归档
    "ArchiveWriter",
    "ArchiveHandle",
    "MANIFEST_ENTRY_NAME",
    "archive_filename",

    # manifest
    "ManifestBuilder",
    "CopyInstruction",
    "SerializedDescriptor",
    "export_value",
    "parse_value",
    "render_manifest_file",
    "load_manifest_file",
    "validate_descriptor",
]
