"""
异常定义

打包流程中的所有错误都会中止整次构建，不做内部重试。
"""


class SugarPackError(Exception):
    """sugarpack 错误基类"""
    pass


class BuildError(SugarPackError):
    """构建错误"""
    pass


class MissingVersionError(BuildError):
    """未提供版本号（参数为空且不存在 version 文件）"""

    def __init__(self, message: str = "缺少版本号: 请通过参数传入版本号，或在工作目录下创建 version 文件"):
        super().__init__(message)


class AlreadyExistsError(BuildError):
    """目标安装包已存在"""

    def __init__(self, path):
        self.path = path
        super().__init__(
            f"安装包 {path} 已存在，未创建新的 zip。"
            "如需重新生成，请删除已有的 zip 文件，或更新 version 文件中的版本号后重新构建。"
        )


class InvalidNameError(BuildError, ValueError):
    """版本号或包标识不能用作安装包文件名"""
    pass


class ArchiveSealedError(BuildError):
    """归档已关闭，不允许继续写入"""
    pass


class DescriptorTypeError(BuildError, TypeError):
    """描述符中出现无法导出的值类型"""
    pass


class ManifestParseError(BuildError, ValueError):
    """manifest.php 内容无法解析"""
    pass


class PackageIOError(BuildError, OSError):
    """遍历、读取或写入过程中的 I/O 错误"""
    pass


class ScanError(PackageIOError):
    """源目录遍历失败"""
    pass


class ArchiveWriteError(PackageIOError):
    """写入归档失败"""
    pass
