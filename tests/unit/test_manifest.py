"""
Manifest 构建器单元测试

测试 copy 指令生成、已有安装动作的保留以及 manifest.php 序列化。
"""

from pathlib import Path

import pytest

from sugarpack.build.collector import FileEntry
from sugarpack.build.manifest import CopyInstruction, ManifestBuilder
from sugarpack.build.php_export import load_manifest_file
from sugarpack.errors import DescriptorTypeError
from sugarpack.utils.paths import strip_prefix_segment


def _entries(*relative_paths):
    return tuple(FileEntry(absolute_path=Path("/work") / rel, relative_path=rel) for rel in relative_paths)


class TestCopyInstruction:
    """CopyInstruction 测试"""

    def test_for_entry(self):
        """测试由打包文件生成复制指令"""
        entry = FileEntry(absolute_path=Path("/work/mymodule/foo.php"), relative_path="mymodule/foo.php")

        instruction = CopyInstruction.for_entry(entry, "mymodule")

        assert instruction.from_path == "<basepath>/mymodule/foo.php"
        assert instruction.to_path == "foo.php"
        assert instruction.to_dict() == {'from': "<basepath>/mymodule/foo.php", 'to': "foo.php"}

    def test_nested_path(self):
        """测试子目录中的文件"""
        entry = FileEntry(absolute_path=Path("/w/src/modules/Leads/x.php"), relative_path="src/modules/Leads/x.php")

        instruction = CopyInstruction.for_entry(entry, "src")

        assert instruction.to_path == "modules/Leads/x.php"

    def test_only_first_segment_stripped(self):
        """测试只去掉首段目录名"""
        assert strip_prefix_segment("src/src/a.php", "src") == "src/a.php"
        assert strip_prefix_segment("srcx/a.php", "src") == "srcx/a.php"
        assert strip_prefix_segment("src\\a.php", "src") == "a.php"


class TestManifestBuilder:
    """ManifestBuilder 测试"""

    def test_one_instruction_per_file_in_order(self):
        """测试每个打包文件一条指令，顺序一致"""
        included = _entries("src/b.php", "src/a.php", "src/d/c.php")

        installdefs, instructions = ManifestBuilder().add_copy_instructions({}, included, "src")

        assert [i.from_path for i in instructions] == [
            "<basepath>/src/b.php",
            "<basepath>/src/a.php",
            "<basepath>/src/d/c.php",
        ]
        assert installdefs['copy'] == [i.to_dict() for i in instructions]

    def test_existing_copy_entries_kept_first(self):
        """测试已有的 copy 条目保留在前面"""
        existing = {'from': '<basepath>/extra/x.php', 'to': 'custom/x.php'}
        installdefs = {'id': 'demo', 'copy': [existing], 'language': [{'from': 'l', 'to_module': 'application'}]}

        result, _ = ManifestBuilder().add_copy_instructions(installdefs, _entries("src/a.php"), "src")

        assert result['copy'] == [existing, {'from': '<basepath>/src/a.php', 'to': 'a.php'}]
        assert result['id'] == 'demo'
        assert result['language'] == installdefs['language']

    def test_input_not_mutated(self):
        """测试不修改传入的描述符"""
        installdefs = {'copy': [{'from': 'a', 'to': 'b'}]}

        ManifestBuilder().add_copy_instructions(installdefs, _entries("src/a.php"), "src")

        assert installdefs == {'copy': [{'from': 'a', 'to': 'b'}]}

    def test_none_installdefs(self):
        """测试未提供安装描述符"""
        result, _ = ManifestBuilder().add_copy_instructions(None, _entries("src/a.php"), "src")

        assert result == {'copy': [{'from': '<basepath>/src/a.php', 'to': 'a.php'}]}

    def test_no_files_gives_empty_copy(self):
        """测试没有打包文件时 copy 为空列表"""
        result, instructions = ManifestBuilder().add_copy_instructions({}, (), "src")

        assert result == {'copy': []}
        assert instructions == ()

    def test_copy_must_be_list(self):
        """测试已有 copy 不是列表时报错"""
        with pytest.raises(DescriptorTypeError):
            ManifestBuilder().add_copy_instructions({'copy': 'oops'}, _entries("src/a.php"), "src")

    def test_build_serializes_both_variables(self):
        """测试生成的 manifest.php 包含 manifest 与 installdefs"""
        manifest = {'name': 'Demo', 'version': '1.0', 'is_uninstallable': True}

        descriptor = ManifestBuilder().build(manifest, {'id': 'demo'}, _entries("src/a.php"), "src")
        loaded_manifest, loaded_installdefs = load_manifest_file(descriptor.content)

        assert loaded_manifest == manifest
        assert loaded_installdefs == {'id': 'demo', 'copy': [{'from': '<basepath>/src/a.php', 'to': 'a.php'}]}
        assert descriptor.installdefs == loaded_installdefs
        assert len(descriptor.copy_instructions) == 1

    def test_build_rejects_unsupported_manifest_value(self):
        """测试 manifest 中存在无法导出的值"""
        with pytest.raises(DescriptorTypeError) as exc_info:
            ManifestBuilder().build({'when': object()}, {}, (), "src")

        assert "$manifest.when" in str(exc_info.value)
