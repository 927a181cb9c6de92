"""
配置 Schema 定义

使用 Pydantic 定义 package.yaml 的配置模型，支持验证和类型检查。
"""

from __future__ import annotations

import re
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from ..build.php_export import validate_descriptor
from ..errors import DescriptorTypeError


class PackageModel(BaseModel):
    """包信息模型"""
    id: str = Field(..., description="包标识（用于 zip 文件名）", min_length=1, max_length=100)
    source_dir: str = Field(..., description="源目录名（相对于工作目录）", min_length=1)

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        """包标识只允许字母、数字、下划线、点和连字符"""
        if not re.match(r'^[A-Za-z0-9_.\-]+$', v):
            raise ValueError("包标识只能包含字母、数字、下划线、点和连字符")
        return v

    @field_validator('source_dir')
    @classmethod
    def validate_source_dir(cls, v: str) -> str:
        """源目录必须是单个目录名"""
        v = v.strip().rstrip('/\\')
        if not v:
            raise ValueError("源目录不能为空")
        if '/' in v or '\\' in v or v in ('.', '..'):
            raise ValueError("源目录必须是工作目录下的单个目录名")
        return v


class OutputModel(BaseModel):
    """输出配置模型"""
    directory: str = Field("releases", description="输出目录（相对于工作目录）", min_length=1)
    compress_level: int = Field(6, description="zip 压缩级别", ge=1, le=9)
    keep_partial: bool = Field(False, description="构建失败时是否保留未完成的 zip")


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


def _check_descriptor(value: Dict[str, Any], name: str) -> Dict[str, Any]:
    try:
        validate_descriptor(value, name)
    except DescriptorTypeError as e:
        raise ValueError(str(e)) from e
    return value


class SugarPackConfig(BaseModel):
    """sugarpack 主配置模型

    这是 package.yaml 的根模型。manifest 与 installdefs 原样写入 manifest.php，
    只允许字符串、数字、布尔、null、列表和字符串键映射。
    """

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")

    package: PackageModel = Field(..., description="包信息")
    manifest: Dict[str, Any] = Field(..., description="manifest 元数据")

    output: OutputModel = Field(default_factory=OutputModel, description="输出配置")
    installdefs: Dict[str, Any] = Field(default_factory=dict, description="安装描述符")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    @field_validator('manifest')
    @classmethod
    def validate_manifest(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _check_descriptor(v, "manifest")

    @field_validator('installdefs')
    @classmethod
    def validate_installdefs(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """copy 如果存在必须是列表"""
        if 'copy' in v and not isinstance(v['copy'], list):
            raise ValueError("installdefs.copy 必须是列表")
        return _check_descriptor(v, "installdefs")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SugarPackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)
