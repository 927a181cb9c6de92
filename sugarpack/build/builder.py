"""
安装包构建器

负责整个打包流程的协调：解析版本号 -> 打开归档 -> 扫描源目录 ->
写入文件 -> 生成 manifest.php -> 关闭归档 -> 报告被排除的文件。
每个阶段返回新的不可变结果，交给下一阶段使用。
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from ..errors import BuildError, PackageIOError
from ..utils.logging import success, warning, debug, error, LogStage, done_logger, manifest_logger, scan_logger
from .archive import DEFAULT_OUTPUT_DIR, MANIFEST_ENTRY_NAME, ArchiveWriter
from .collector import ClassificationResult, FileEntry, TreeScanner
from .manifest import ManifestBuilder, SerializedDescriptor

# 进度回调类型: (阶段, 当前, 总数, 消息)
ProgressCallback = Callable[[str, int, int, str], None]

VERSION_FILE_NAME = "version"


@dataclass(frozen=True)
class PackageArtifact:
    """构建完成的安装包"""
    path: Path
    package_id: str
    version: str
    included: Tuple[FileEntry, ...] = ()
    excluded: Tuple[FileEntry, ...] = ()
    descriptor: Optional[SerializedDescriptor] = None
    build_time: float = 0.0

    @property
    def filename(self) -> str:
        return self.path.name


class PackageAssembler:
    """安装包构建器"""

    def __init__(
        self,
        work_dir: Union[str, Path] = ".",
        output_dir: str = DEFAULT_OUTPUT_DIR,
        compress_level: int = 6,
        keep_partial: bool = False,
    ):
        """初始化构建器

        Args:
            work_dir: 工作目录（源目录、version 文件与输出目录均相对于它）
            output_dir: 输出目录名
            compress_level: zip 压缩级别
            keep_partial: 构建失败时是否保留未完成的 zip
        """
        self.work_dir = Path(work_dir)
        self.keep_partial = keep_partial
        self.scanner = TreeScanner(self.work_dir)
        self.writer = ArchiveWriter(self.work_dir, output_dir, compress_level)
        self.manifest_builder = ManifestBuilder()

    def resolve_version(self, explicit_version: Optional[str]) -> Optional[str]:
        """确定本次构建使用的版本号

        参数为空时读取工作目录下的 version 文件（去掉首尾空白）；
        文件不存在时原样返回参数，由打开归档时报错。

        Raises:
            PackageIOError: version 文件无法读取或不是 UTF-8 文本
        """
        if not explicit_version:
            version_file = self.work_dir / VERSION_FILE_NAME
            if version_file.is_file():
                try:
                    version = version_file.read_text(encoding='utf-8').strip()
                except (OSError, UnicodeDecodeError) as e:
                    raise PackageIOError(f"无法读取版本文件 {version_file}: {e}") from e
                debug(f"从 {version_file} 读取版本号: {version}", stage=LogStage.INIT)
                return version
        return explicit_version

    def assemble(
        self,
        version: Optional[str],
        package_id: str,
        source_dir: str,
        manifest: Mapping[str, Any],
        installdefs: Optional[Mapping[str, Any]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PackageArtifact:
        """构建安装包

        Args:
            version: 版本号，为空时从 version 文件读取
            package_id: 包标识
            source_dir: 源目录名
            manifest: manifest 元数据
            installdefs: 安装描述符（可预先包含非 copy 的安装动作）
            progress_callback: 进度回调函数

        Returns:
            PackageArtifact: 已关闭的安装包

        Raises:
            MissingVersionError: 无法确定版本号
            AlreadyExistsError: 安装包已存在
            InvalidNameError: 版本号或包标识包含路径成分
            BuildError: 其他构建错误
        """
        start_time = time.time()
        # 扫描与 copy 指令共用同一个源目录名（不含末尾分隔符）
        source_dir = source_dir.rstrip('/\\')
        resolved_version = self.resolve_version(version)

        handle = self.writer.open(resolved_version, package_id)

        try:
            result = self.scanner.scan(source_dir)
            scan_logger.debug(f"扫描完成: 打包 {len(result.included)} 个, 排除 {len(result.excluded)} 个")

            total = len(result.included)
            for index, entry in enumerate(result.included, start=1):
                self.writer.add_file(handle, entry)
                if progress_callback:
                    progress_callback("写入文件", index, total, entry.relative_path)

            descriptor = self.manifest_builder.build(manifest, installdefs, result.included, source_dir)
            self.writer.add_content(handle, MANIFEST_ENTRY_NAME, descriptor.content)
            manifest_logger.debug(f"{MANIFEST_ENTRY_NAME}: {len(descriptor.copy_instructions)} 条 copy 指令")

            artifact_path = self.writer.close(handle)

        except Exception as e:
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            if self.keep_partial:
                warning(f"保留未完成的安装包: {handle.path}", stage=LogStage.BUILD)
            else:
                self.writer.discard(handle)
            if isinstance(e, BuildError):
                raise
            raise BuildError(f"构建失败: {e}") from e

        self.report_excluded(result)

        return PackageArtifact(
            path=artifact_path,
            package_id=package_id,
            version=resolved_version,
            included=result.included,
            excluded=result.excluded,
            descriptor=descriptor,
            build_time=time.time() - start_time,
        )

    @staticmethod
    def report_excluded(result: ClassificationResult) -> None:
        """输出被排除的文件列表（没有排除时不输出）"""
        if not result.excluded:
            return

        done_logger.info("以下文件未打入 zip:")
        for entry in result.excluded:
            done_logger.info(f" [*] {entry.relative_path}")


def build_package(
    work_dir: Union[str, Path],
    version: Optional[str],
    package_id: str,
    source_dir: str,
    manifest: Mapping[str, Any],
    installdefs: Optional[Mapping[str, Any]] = None,
) -> PackageArtifact:
    """便捷函数：使用默认设置构建安装包"""
    artifact = PackageAssembler(work_dir).assemble(version, package_id, source_dir, manifest, installdefs)
    success(f"安装包构建成功: {artifact.path}", stage=LogStage.BUILD)
    return artifact
