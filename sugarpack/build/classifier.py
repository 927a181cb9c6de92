"""
路径分类器

决定源目录中的某个相对路径是否应打入安装包。
以下目录中的文件会被排除（由 SugarCRM 在安装时重新生成）：

    custom/application/Ext/
    custom/modules/<模块>/Ext/

匹配不区分路径分隔符（正斜杠或反斜杠），区分大小写，且不锚定在路径开头。
"""

import re

from ..utils.paths import to_posix

# 路径先统一为正斜杠再匹配
EXCLUDE_PATTERNS = (
    re.compile(r'custom/application/Ext/'),
    re.compile(r'custom/modules/.+/Ext/'),
)


class PathClassifier:
    """路径分类器"""

    def __init__(self, patterns=EXCLUDE_PATTERNS):
        self.patterns = tuple(patterns)

    def should_include(self, relative_path: str) -> bool:
        """判断文件是否应打入安装包

        Args:
            relative_path: 以源目录名开头的相对路径

        Returns:
            bool: True 表示包含，False 表示排除
        """
        path_str = to_posix(relative_path)
        return not any(pattern.search(path_str) for pattern in self.patterns)

    def __call__(self, relative_path: str) -> bool:
        return self.should_include(relative_path)


default_classifier = PathClassifier()


def should_include(relative_path: str) -> bool:
    """便捷函数：使用默认规则判断文件是否应打入安装包"""
    return default_classifier.should_include(relative_path)
