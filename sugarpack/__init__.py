"""
sugarpack - SugarCRM Module Loadable Package 构建工具

Builds installable module packages (zip + manifest.php) from a source tree.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import SugarPackConfig
from .build.builder import PackageAssembler, PackageArtifact

__all__ = ["SugarPackConfig", "PackageAssembler", "PackageArtifact", "__version__"]
