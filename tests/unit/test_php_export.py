"""
PHP 描述符导出与解析单元测试
"""

import math

import pytest

from sugarpack.build.php_export import (
    export_value,
    load_manifest_file,
    parse_value,
    render_manifest_file,
    validate_descriptor,
)
from sugarpack.errors import DescriptorTypeError, ManifestParseError


class TestExportScalars:
    """标量导出测试"""

    @pytest.mark.parametrize("value,expected", [
        (None, "NULL"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (-12, "-12"),
        (1.5, "1.5"),
        (1.0, "1.0"),
        (1e20, "1.0E+20"),
        (2.5e-7, "2.5E-7"),
        (math.inf, "INF"),
        (-math.inf, "-INF"),
        (math.nan, "NAN"),
        ("abc", "'abc'"),
        ("", "''"),
    ])
    def test_scalar(self, value, expected):
        """测试标量值"""
        assert export_value(value) == expected

    def test_string_escapes(self):
        """测试单引号与反斜杠转义"""
        assert export_value("it's") == "'it\\'s'"
        assert export_value("C:\\path") == "'C:\\\\path'"

    def test_string_keeps_newlines(self):
        """测试换行原样保留"""
        assert export_value("a\nb") == "'a\nb'"


class TestExportArrays:
    """数组导出测试"""

    def test_empty_containers(self):
        """测试空数组"""
        assert export_value([]) == "array (\n)"
        assert export_value({}) == "array (\n)"

    def test_flat_mapping(self):
        """测试一层映射"""
        assert export_value({"name": "Demo", "is_uninstallable": True}) == (
            "array (\n"
            "  'name' => 'Demo',\n"
            "  'is_uninstallable' => true,\n"
            ")"
        )

    def test_list_uses_integer_keys(self):
        """测试列表使用整数键"""
        assert export_value(["ENT", "ULT"]) == (
            "array (\n"
            "  0 => 'ENT',\n"
            "  1 => 'ULT',\n"
            ")"
        )

    def test_nested_layout(self):
        """测试嵌套数组的换行与缩进"""
        value = {"copy": [{"from": "<basepath>/src/a.php", "to": "a.php"}]}

        assert export_value(value) == (
            "array (\n"
            "  'copy' => \n"
            "  array (\n"
            "    0 => \n"
            "    array (\n"
            "      'from' => '<basepath>/src/a.php',\n"
            "      'to' => 'a.php',\n"
            "    ),\n"
            "  ),\n"
            ")"
        )

    def test_tuple_exported_as_list(self):
        """测试元组按列表导出"""
        assert export_value((1, 2)) == export_value([1, 2])

    def test_non_string_key_rejected(self):
        """测试非字符串键"""
        with pytest.raises(DescriptorTypeError):
            export_value({1: "a"})

    def test_unsupported_type_rejected(self):
        """测试不支持的类型"""
        with pytest.raises(DescriptorTypeError):
            export_value({"when": object()})


class TestValidateDescriptor:
    """描述符校验测试"""

    def test_valid_descriptor(self):
        """测试合法描述符"""
        validate_descriptor({"a": [1, 2.0, None, True, {"b": "c"}]})

    def test_reports_location(self):
        """测试错误信息包含位置"""
        with pytest.raises(DescriptorTypeError) as exc_info:
            validate_descriptor({"acceptable_sugar_versions": {"regex_matches": [b"bytes"]}}, "$manifest")

        message = str(exc_info.value)
        assert "$manifest.acceptable_sugar_versions.regex_matches[0]" in message
        assert "bytes" in message

    def test_is_type_error(self):
        """测试异常同时是 TypeError"""
        with pytest.raises(TypeError):
            validate_descriptor({"s": {1, 2}})


class TestParseValue:
    """解析测试"""

    def test_parse_scalars(self):
        """测试解析标量"""
        assert parse_value("NULL") is None
        assert parse_value("true") is True
        assert parse_value("FALSE") is False
        assert parse_value("42") == 42
        assert parse_value("-3") == -3
        assert parse_value("1.0E+20") == 1e20
        assert parse_value("-INF") == -math.inf
        assert math.isnan(parse_value("NAN"))
        assert parse_value("'it\\'s'") == "it's"

    def test_parse_list_and_dict(self):
        """测试键为 0..n-1 的数组还原为列表"""
        assert parse_value("array (0 => 'a', 1 => 'b')") == ["a", "b"]
        assert parse_value("array (1 => 'a')") == {1: "a"}
        assert parse_value("array ('0' => 'a')") == {"0": "a"}
        assert parse_value("array ()") == []

    def test_parse_short_syntax(self):
        """测试短数组语法与省略键"""
        assert parse_value("['a', 'b',]") == ["a", "b"]
        assert parse_value("['k' => [1, 2]]") == {"k": [1, 2]}

    def test_parse_errors(self):
        """测试无法解析的内容"""
        with pytest.raises(ManifestParseError):
            parse_value("array ('a' => )")
        with pytest.raises(ManifestParseError):
            parse_value("array ('a' => 1")
        with pytest.raises(ManifestParseError):
            parse_value("'a' 'b'")
        with pytest.raises(ValueError):
            parse_value("new Foo()")


class TestManifestFile:
    """manifest.php 文件测试"""

    def test_render_and_load(self):
        """测试生成的文件可以被解析回来"""
        manifest = {
            "name": "Demo's module",
            "version": "1.0",
            "acceptable_sugar_versions": {"regex_matches": ["7\\..*"]},
            "published_date": "2024-01-01",
            "is_uninstallable": True,
            "readme": "",
            "build": 3,
        }
        installdefs = {
            "id": "demo",
            "copy": [{"from": "<basepath>/src/a.php", "to": "a.php"}],
        }

        content = render_manifest_file(manifest, installdefs)
        loaded_manifest, loaded_installdefs = load_manifest_file(content)

        assert content.startswith("<?php\n$manifest = array (\n")
        assert "\n$installdefs = array (\n" in content
        assert content.endswith(");\n")
        assert loaded_manifest == manifest
        assert loaded_installdefs == installdefs

    def test_empty_mapping_loads_as_list(self):
        """测试空映射重新加载后为空列表"""
        content = render_manifest_file({'name': 'x'}, {'language': {}})

        assert load_manifest_file(content) == ({'name': 'x'}, {'language': []})

    def test_load_ignores_comments(self):
        """测试忽略注释与结束标记"""
        text = (
            "<?php\n"
            "// generated\n"
            "/* block */\n"
            "$manifest = array ('name' => 'x'); # trailing\n"
            "$installdefs = array ();\n"
            "?>\n"
        )
        assert load_manifest_file(text) == ({"name": "x"}, [])

    def test_load_missing_variable(self):
        """测试缺少变量"""
        with pytest.raises(ManifestParseError) as exc_info:
            load_manifest_file("<?php\n$manifest = array ();\n")

        assert "$installdefs" in str(exc_info.value)

    def test_load_rejects_statements(self):
        """测试拒绝非赋值语句"""
        with pytest.raises(ManifestParseError):
            load_manifest_file("<?php\necho 'hi';\n")
